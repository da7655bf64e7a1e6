"""Derives Solidity source for a reactive contract from an AutomationConfig.

The generator turns each event/function pair into three fragments (a topic
constant, a subscription statement and a reaction branch), fills in the
chain/address constants, and renders the result into the skeleton chosen by
the TemplateLibrary. Generation is pure: the same configuration always yields
byte-identical source.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Type

from reactforge.errors import GenerationError, TemplateError
from reactforge.templates import TemplateId, TemplateLibrary
from reactforge.types import AutomationConfig, EventFunctionPair, GeneratedSource
from reactforge.utils.signatures import checksum, event_topic, parse_signature

logger = logging.getLogger(__name__)

# Log fields holding a uint256 value, and how they are read inside react().
_UINT_FIELDS = {
    "topic_1": "log.topic_1",
    "topic_2": "log.topic_2",
    "topic_3": "log.topic_3",
    "chain_id": "log.chain_id",
    "block_number": "log.block_number",
}

_SUB_UINTS = ("uint8", "uint16", "uint32", "uint64", "uint128")

_BRANCH_INDENT = " " * 12


def topic_constant(index: int) -> str:
    return f"EVENT_{index}_TOPIC_0"


def resolve_topics(pairs: Sequence[EventFunctionPair]) -> List[str]:
    """
    Topic-0 of every pair, in pair order.

    Supplied topics are used as-is; the rest are hashed from the event
    signature.

    Raises:
        GenerationError: If two pairs resolve to the same topic, whether the
            events are declared twice or two signatures collide.
    """
    topics: List[str] = []
    seen: Dict[str, int] = {}
    for index, pair in enumerate(pairs):
        topic = pair.topic0 or event_topic(pair.event_signature)
        if topic in seen:
            first = seen[topic]
            if pairs[first].event_signature == pair.event_signature:
                reason = f"event '{pair.event_signature}' is declared by pairs {first} and {index}"
            else:
                reason = (
                    f"pairs {first} ('{pairs[first].event_signature}') and {index} "
                    f"('{pair.event_signature}') share topic-0 {topic}"
                )
            raise GenerationError(
                f"Duplicate topic-0: {reason}; the second reaction branch would never run"
            )
        seen[topic] = index
        topics.append(topic)
    return topics


def argument_expression(param_type: str, source: str) -> str:
    """
    Solidity expression reading one target-function argument from the log record.

    Args:
        param_type: Canonical ABI type of the target parameter.
        source: Log field name (see types.LOG_FIELDS).

    Raises:
        GenerationError: If the field cannot be converted to the type.
    """
    if source == "contract":
        if param_type == "address":
            return "log._contract"
        if param_type == "uint256":
            return "uint256(uint160(log._contract))"
    elif source == "data":
        if param_type == "bytes":
            return "log.data"
        if param_type == "string":
            return "string(log.data)"
        # first ABI word of the non-indexed event data
        return f"abi.decode(log.data, ({param_type}))"
    elif source in _UINT_FIELDS:
        expr = _UINT_FIELDS[source]
        if param_type == "uint256":
            return expr
        if param_type == "address":
            return f"address(uint160({expr}))"
        if param_type == "bool":
            return f"{expr} != 0"
        if param_type in _SUB_UINTS or param_type in ("int256", "bytes32"):
            return f"{param_type}({expr})"
    raise GenerationError(f"log field '{source}' cannot be passed as a {param_type} argument")


def call_arguments(pair: EventFunctionPair) -> List[str]:
    """
    Argument expressions for the pair's target function.

    Argument 0 is the address slot the callback proxy replaces with the
    reactive VM id, so it is always ``address(0)``. Argument ``k`` reads the
    field named in the pair's mapping, else ``topic_k`` (or the raw data for
    ``bytes``/``string`` parameters).
    """
    types = parse_signature(pair.function_signature).types
    args = ["address(0)"]
    for position, param_type in enumerate(types[1:], start=1):
        source = pair.mapping.get(position)
        if source is None:
            if param_type in ("bytes", "string"):
                source = "data"
            elif position <= 3:
                source = f"topic_{position}"
            else:
                raise GenerationError(
                    f"cannot derive argument {position} of '{pair.function_signature}': "
                    f"only topic_1..topic_3 are available by default, add a mapping entry"
                )
        try:
            args.append(argument_expression(param_type, source))
        except GenerationError as e:
            raise GenerationError(
                f"argument {position} of '{pair.function_signature}': {e}"
            ) from e
    return args


class ContractGenerator:
    """Generates reactive contract source from a validated configuration."""

    def __init__(self, library: Type[TemplateLibrary] = TemplateLibrary) -> None:
        self._library = library

    def generate(self, config: AutomationConfig) -> GeneratedSource:
        """
        Produce the contract source for `config`.

        Args:
            config: A configuration returned by ConfigValidator.validate.

        Returns:
            The immutable generated source.

        Raises:
            GenerationError: If a required value cannot be derived (duplicate
                topics, underivable arguments, incomplete template values).
        """
        template_id = self._library.select_template(config)
        values = self.placeholder_values(config, template_id)
        try:
            text = self._library.render(template_id, values)
        except TemplateError as e:
            raise GenerationError(str(e)) from e

        logger.debug(
            "Generated %s from template %s (%d pair(s))",
            config.contract_name,
            template_id.value,
            len(config.pairs),
        )
        return GeneratedSource(
            text=text,
            contract_name=config.contract_name,
            template_id=template_id.value,
        )

    def placeholder_values(self, config: AutomationConfig, template_id: TemplateId) -> Dict[str, str]:
        """All fragments the chosen skeleton needs, keyed by placeholder name."""
        topics = resolve_topics(config.pairs)
        pausable = template_id == TemplateId.PAUSABLE

        values = {
            "CONTRACT_NAME": config.contract_name,
            "ORIGIN_CHAIN_ID": str(config.origin_chain_id),
            "DESTINATION_CHAIN_ID": str(config.destination_chain_id),
            "ORIGIN_CONTRACT": checksum(config.origin_contract),
            "DESTINATION_CONTRACT": checksum(config.destination_contract),
            "CALLBACK_GAS_LIMIT": str(config.callback_gas_limit),
            "EVENT_CONSTANTS": self._event_constants(topics),
            "SUBSCRIPTIONS": self._subscriptions(len(topics)),
            "REACT_LOGIC": self._react_logic(config, mark_triggered=pausable),
        }
        if config.owner_address:
            values["OWNER_ADDRESS"] = checksum(config.owner_address)
        if pausable:
            values.update(self._pausable_values(config, len(topics)))
        return values

    @staticmethod
    def _event_constants(topics: Sequence[str]) -> str:
        return "\n".join(
            f"    uint256 private constant {topic_constant(i)} = {topic};"
            for i, topic in enumerate(topics)
        )

    @staticmethod
    def _subscriptions(count: int) -> str:
        return "\n".join(
            "        service.subscribe(\n"
            "            ORIGIN_CHAIN_ID,\n"
            "            ORIGIN_CONTRACT,\n"
            f"            {topic_constant(i)},\n"
            "            REACTIVE_IGNORE,\n"
            "            REACTIVE_IGNORE,\n"
            "            REACTIVE_IGNORE\n"
            "        );"
            for i in range(count)
        )

    def _react_logic(self, config: AutomationConfig, mark_triggered: bool) -> str:
        lines: List[str] = []
        if config.owner_address:
            lines.append(
                f"{_BRANCH_INDENT}require(address(uint160(log.topic_1)) == OWNER, 'Unauthorized trigger');"
            )

        for index, pair in enumerate(config.pairs):
            condition = f"if (log.topic_0 == {topic_constant(index)}) {{"
            if index == 0:
                lines.append(_BRANCH_INDENT + condition)
            else:
                lines[-1] += " else " + condition
            lines.extend(self._branch_body(pair, mark_triggered))
            lines.append(_BRANCH_INDENT + "}")
        return "\n".join(lines)

    @staticmethod
    def _branch_body(pair: EventFunctionPair, mark_triggered: bool) -> List[str]:
        inner = _BRANCH_INDENT + "    "
        args = [f'"{pair.function_signature}"'] + call_arguments(pair)
        body = [inner + "bytes memory payload = abi.encodeWithSignature("]
        body.extend(f"{inner}    {arg}," for arg in args[:-1])
        body.append(f"{inner}    {args[-1]}")
        body.append(inner + ");")
        if mark_triggered:
            body.append(inner + "triggered = true;")
        body.append(
            inner + "emit Callback(DESTINATION_CHAIN_ID, DESTINATION_CONTRACT, CALLBACK_GAS_LIMIT, payload);"
        )
        return body

    @staticmethod
    def _pausable_values(config: AutomationConfig, count: int) -> Dict[str, str]:
        state = ["    bool private triggered;", "    bool private done;"]
        constructor = ["        triggered = false;", "        done = false;", "        paused = false;"]
        if config.owner_address:
            state.append(f"    address private constant OWNER = {checksum(config.owner_address)};")
            constructor.append("        owner = OWNER;")

        entries = [
            _subscription_entry(i, "ORIGIN_CHAIN_ID", "ORIGIN_CONTRACT", topic_constant(i))
            for i in range(count)
        ]
        # completion watch on the destination contract, see the pausable skeleton
        entries.append(
            _subscription_entry(count, "DESTINATION_CHAIN_ID", "DESTINATION_CONTRACT", "REACTIVE_IGNORE")
        )
        return {
            "STATE_VARIABLES": "\n".join(state),
            "CONSTRUCTOR_LOGIC": "\n".join(constructor),
            "SUBSCRIPTION_COUNT": str(count + 1),
            "PAUSABLE_SUBSCRIPTIONS": "\n".join(entries),
        }


def _subscription_entry(index: int, chain: str, contract: str, topic: str) -> str:
    return (
        f"        result[{index}] = Subscription(\n"
        f"            {chain},\n"
        f"            {contract},\n"
        f"            {topic},\n"
        "            REACTIVE_IGNORE,\n"
        "            REACTIVE_IGNORE,\n"
        "            REACTIVE_IGNORE\n"
        "        );"
    )
