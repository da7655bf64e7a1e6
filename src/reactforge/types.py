"""Defines the core data structures and Pydantic models for reactforge.

This module contains the central types that flow through the generation
pipeline: the validated automation configuration, the generated source, the
structural validation report, compiler diagnostics and artifacts, and the
final pipeline result. Validation rules for user input live on the models
themselves so that pydantic can collect every violation in one pass.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from reactforge.utils.signatures import (
    SignatureSyntaxError,
    is_address,
    is_bytes32_hex,
    is_identifier,
    parse_signature,
)

# Log record fields a target-function argument can be read from.
LOG_FIELDS = ("topic_1", "topic_2", "topic_3", "data", "chain_id", "block_number", "contract")

# Contract names declared by the shared prelude; a generated contract may not reuse them.
RESERVED_CONTRACT_NAMES = (
    "IPayer",
    "IReactive",
    "IPayable",
    "ISubscriptionService",
    "ISystemContract",
    "AbstractPayer",
    "AbstractReactive",
    "AbstractPausableReactive",
)

PAIR_KEYS = ("pairs", "topicFunctionPairs", "eventFunctionPairs")

_UINT64_MAX = 2**64 - 1
_UINT256_MAX = 2**256 - 1
_DIGITS_RE = re.compile(r"^[0-9]+$")


def _as_int(value: Any, what: str) -> int:
    # bool is an int subclass; "true" is never a chain id
    if isinstance(value, bool):
        raise ValueError(f"{what} must be an integer, got a boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _DIGITS_RE.match(value.strip()):
        return int(value.strip())
    raise ValueError(f"{what} must be an integer, got {value!r}")


class EventFunctionPair(BaseModel):
    """One origin event and the destination function it should trigger.

    Attributes:
        event_signature: Canonical event signature, e.g.
            "Transfer(address,address,uint256)".
        function_signature: Canonical target function signature. Its first
            parameter must be an address: the callback proxy overwrites it
            with the reactive VM id.
        topic0: Optional pre-computed topic-0 (0x + 64 hex, lowercase). When
            absent the generator hashes `event_signature`.
        mapping: Optional table from target-function argument position
            (1-based, argument 0 is reserved) to the log field it is read from.
    """
    model_config = ConfigDict(frozen=True)

    event_signature: str = Field(
        validation_alias=AliasChoices("event", "eventSignature", "event_signature")
    )
    function_signature: str = Field(
        validation_alias=AliasChoices("function", "functionSignature", "function_signature")
    )
    topic0: Optional[str] = Field(default=None, validation_alias=AliasChoices("topic0", "topic_0"))
    mapping: Dict[int, str] = Field(default_factory=dict)

    @field_validator("event_signature")
    @classmethod
    def _check_event(cls, v: str) -> str:
        try:
            return parse_signature(v).canonical
        except SignatureSyntaxError as e:
            raise ValueError(f"malformed event signature: {e}") from e

    @field_validator("function_signature")
    @classmethod
    def _check_function(cls, v: str) -> str:
        try:
            sig = parse_signature(v)
        except SignatureSyntaxError as e:
            raise ValueError(f"malformed function signature: {e}") from e
        if not sig.types or sig.types[0] != "address":
            raise ValueError(
                f"function signature '{v}' must take an address as its first parameter"
            )
        return sig.canonical

    @field_validator("topic0")
    @classmethod
    def _check_topic0(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not is_bytes32_hex(v):
            raise ValueError(f"topic0 '{v}' is not a 0x-prefixed 64-hex-digit value")
        return v.lower()

    @field_validator("mapping")
    @classmethod
    def _check_mapping_sources(cls, v: Dict[int, str]) -> Dict[int, str]:
        unknown = sorted(src for src in v.values() if src not in LOG_FIELDS)
        if unknown:
            raise ValueError(
                f"unknown log field(s) {', '.join(unknown)} (allowed: {', '.join(LOG_FIELDS)})"
            )
        return v

    @model_validator(mode="after")
    def _check_mapping_positions(self) -> "EventFunctionPair":
        arity = len(parse_signature(self.function_signature).types)
        bad = sorted(pos for pos in self.mapping if pos < 1 or pos >= arity)
        if bad:
            raise ValueError(
                f"mapping position(s) {', '.join(map(str, bad))} are outside 1..{arity - 1} "
                f"for '{self.function_signature}'"
            )
        return self


class AutomationConfig(BaseModel):
    """The validated description of one cross-contract automation.

    Attributes:
        pairs: Ordered event/function pairs. Order matters: reaction branches
            are chained in this order and the first match wins.
        origin_chain_id: Chain the origin events are emitted on.
        destination_chain_id: Chain the callback is delivered to.
        origin_contract: Lowercase address of the contract emitting events.
        destination_contract: Lowercase address receiving callbacks.
        owner_address: Optional owner; enables owner-gated reactions.
        is_pausable: Whether the pause/resume skeleton is used.
        contract_name: Name of the generated contract.
        callback_gas_limit: Gas limit attached to every callback.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    pairs: List[EventFunctionPair] = Field(
        min_length=1, validation_alias=AliasChoices(*PAIR_KEYS)
    )
    origin_chain_id: int
    destination_chain_id: int
    origin_contract: str
    destination_contract: str
    owner_address: Optional[str] = None
    is_pausable: bool = False
    contract_name: str = "ReactiveContract"
    callback_gas_limit: int = 1_000_000

    @model_validator(mode="before")
    @classmethod
    def _fold_single_pair(cls, data: Any) -> Any:
        if not isinstance(data, dict) or any(key in data for key in PAIR_KEYS):
            return data
        if "event" not in data and "function" not in data:
            return data
        data = dict(data)
        data["pairs"] = [
            {key: data.pop(key) for key in ("event", "function", "topic0", "mapping") if key in data}
        ]
        return data

    @field_validator("origin_chain_id", "destination_chain_id", mode="before")
    @classmethod
    def _check_chain_id(cls, v: Any) -> int:
        value = _as_int(v, "chain id")
        if not 0 < value <= _UINT256_MAX:
            raise ValueError(f"chain id must be a positive unsigned integer, got {value}")
        return value

    @field_validator("callback_gas_limit", mode="before")
    @classmethod
    def _check_gas_limit(cls, v: Any) -> int:
        value = _as_int(v, "callback gas limit")
        if not 0 < value <= _UINT64_MAX:
            raise ValueError(f"callback gas limit must fit in uint64, got {value}")
        return value

    @field_validator("origin_contract", "destination_contract", "owner_address")
    @classmethod
    def _check_address(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not is_address(v):
            raise ValueError(f"'{v}' is not a 0x-prefixed 40-hex-digit address")
        return v.lower()

    @field_validator("contract_name")
    @classmethod
    def _check_contract_name(cls, v: str) -> str:
        if not is_identifier(v):
            raise ValueError(f"'{v}' is not a valid contract identifier")
        if v in RESERVED_CONTRACT_NAMES:
            raise ValueError(f"'{v}' clashes with a contract declared by the template prelude")
        return v


class GeneratedSource(BaseModel):
    """Immutable source text produced by one generator run."""
    model_config = ConfigDict(frozen=True)

    text: str
    contract_name: str
    template_id: str


class Finding(BaseModel):
    """A single structural rule outcome."""
    model_config = ConfigDict(frozen=True)

    rule: str
    severity: Literal["error", "warning"]
    message: str

    def __str__(self) -> str:
        return f"[{self.rule}] {self.message}"


class ValidationReport(BaseModel):
    """Result of one structural validation call.

    `errors` and `warnings` are derived from `findings`; each entry is
    prefixed with the id of the rule that produced it.
    """
    findings: List[Finding] = Field(default_factory=list)

    @computed_field
    @property
    def errors(self) -> List[str]:
        return [str(f) for f in self.findings if f.severity == "error"]

    @computed_field
    @property
    def warnings(self) -> List[str]:
        return [str(f) for f in self.findings if f.severity == "warning"]

    @computed_field
    @property
    def is_valid(self) -> bool:
        return not self.errors

    def failed_rules(self) -> List[str]:
        return [f.rule for f in self.findings if f.severity == "error"]


class Diagnostic(BaseModel):
    """A compiler diagnostic, trimmed to what a user needs to act on it.

    Attributes:
        severity: "error", "warning" or "info", as reported by solc.
        type: solc's error type, e.g. "ParserError" or "TypeError".
        message: Short message.
        formatted_message: solc's rendering including the source excerpt.
        line: 1-based line in the submitted source, when solc gave a location.
    """
    model_config = ConfigDict(frozen=True)

    severity: str
    type: str = ""
    message: str = ""
    formatted_message: str = ""
    line: Optional[int] = None

    @classmethod
    def from_solc(cls, entry: Dict[str, Any], source_text: str = "") -> "Diagnostic":
        """Builds a Diagnostic from one entry of solc's `errors` array."""
        line = None
        location = entry.get("sourceLocation") or {}
        start = location.get("start")
        # solc reports byte offsets into the UTF-8 encoded source
        encoded = source_text.encode("utf-8")
        if isinstance(start, int) and 0 <= start <= len(encoded):
            line = encoded.count(b"\n", 0, start) + 1
        return cls(
            severity=entry.get("severity", "error"),
            type=entry.get("type", ""),
            message=entry.get("message", ""),
            formatted_message=entry.get("formattedMessage", ""),
            line=line,
        )

    def __str__(self) -> str:
        where = f" (line {self.line})" if self.line else ""
        return f"{self.type or self.severity}{where}: {self.message}"


class CompilationArtifact(BaseModel):
    """ABI and bytecode of one compiled contract, exactly as solc reported them."""
    model_config = ConfigDict(frozen=True)

    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    compiler_version: str = ""
    warnings: List[Diagnostic] = Field(default_factory=list)


class Stage(str, Enum):
    """Pipeline stage a failure originated from."""
    CONFIG = "config"
    GENERATION = "generation"
    STRUCTURAL = "structural"
    COMPILATION = "compilation"


class PipelineSuccess(BaseModel):
    status: Literal["success"] = "success"
    source: str
    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str
    warnings: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True


class PipelineFailure(BaseModel):
    """A failed run, tagged with the stage that stopped it.

    Attributes:
        stage: Stage that failed.
        detail: One-line summary.
        errors: Complete list of problems (config violations, failed rules,
            compiler diagnostics).
        warnings: Advisory output gathered before the failure.
        kind: Sub-kind for compilation failures.
        source: Source text, when the failure happened after generation.
        diagnostics: Raw compiler messages as solc formatted them, for debugging.
    """
    status: Literal["failure"] = "failure"
    stage: Stage
    detail: str
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    kind: Optional[str] = None
    source: Optional[str] = None
    diagnostics: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return False


PipelineResult = Annotated[Union[PipelineSuccess, PipelineFailure], Field(discriminator="status")]
