import re

import pytest

from reactforge.errors import GenerationError
from reactforge.pipeline.config_validator import ConfigValidator
from reactforge.pipeline.generator import (
    ContractGenerator,
    argument_expression,
    call_arguments,
    resolve_topics,
    topic_constant,
)
from reactforge.templates import PLACEHOLDER_RE
from reactforge.types import EventFunctionPair

TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
OWNER = "0x" + "33" * 20


def _generate(raw):
    return ContractGenerator().generate(ConfigValidator.validate(raw))


def _pair(event, function, **extra):
    return EventFunctionPair.model_validate({"event": event, "function": function, **extra})


# --- Basic single pair --------------------------------------------------------

def test_transfer_scenario_shape(transfer_config):
    generated = _generate(transfer_config)
    text = generated.text

    assert generated.contract_name == "ReactiveContract"
    assert generated.template_id == "basic-single-pair"
    assert text.count("uint256 private constant EVENT_") == 1
    assert f"uint256 private constant EVENT_0_TOPIC_0 = {TRANSFER_TOPIC};" in text
    assert text.count("service.subscribe(") == 1
    assert text.count("log.topic_0 == EVENT_") == 1
    assert "contract ReactiveContract is AbstractReactive {" in text
    assert not PLACEHOLDER_RE.search(text)
    assert text.endswith("}")


def test_constants_are_rendered(transfer_config):
    text = _generate(transfer_config).text
    assert "uint256 private constant ORIGIN_CHAIN_ID = 1;" in text
    assert "uint256 private constant DESTINATION_CHAIN_ID = 1;" in text
    assert "address private constant ORIGIN_CONTRACT = 0x1111111111111111111111111111111111111111;" in text
    assert "uint64 private constant CALLBACK_GAS_LIMIT = 1000000;" in text


def test_addresses_are_checksummed(transfer_config):
    transfer_config["originContract"] = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
    text = _generate(transfer_config).text
    assert "ORIGIN_CONTRACT = 0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed;" in text


def test_subscription_uses_ignore_sentinel_for_unused_topics(transfer_config):
    text = _generate(transfer_config).text
    subscription = text[text.index("service.subscribe("):]
    subscription = subscription[:subscription.index(");")]
    assert "EVENT_0_TOPIC_0" in subscription
    assert subscription.count("REACTIVE_IGNORE") == 3
    assert not re.search(r",\s*0\s*[,)]", subscription)


def test_reaction_branch_encodes_call_and_emits_callback(transfer_config):
    text = _generate(transfer_config).text
    assert 'abi.encodeWithSignature(\n                    "onTransfer(address,uint256)",' in text
    assert "address(0),\n                    log.topic_1\n" in text
    assert "emit Callback(DESTINATION_CHAIN_ID, DESTINATION_CONTRACT, CALLBACK_GAS_LIMIT, payload);" in text


def test_supplied_topic0_is_used_verbatim(transfer_config):
    topic = "0x" + "ab" * 32
    transfer_config["pairs"][0]["topic0"] = topic
    text = _generate(transfer_config).text
    assert f"EVENT_0_TOPIC_0 = {topic};" in text
    assert TRANSFER_TOPIC not in text


# --- Determinism and order ----------------------------------------------------

def test_generation_is_deterministic(two_pair_config):
    first = _generate(two_pair_config)
    second = _generate(two_pair_config)
    assert first.text == second.text
    assert first == second


def test_pair_order_decides_branch_order(two_pair_config):
    forward = _generate(two_pair_config).text
    two_pair_config["pairs"] = list(reversed(two_pair_config["pairs"]))
    reverse = _generate(two_pair_config).text

    assert forward != reverse
    assert forward.index('"onTransfer(') < forward.index('"onApproval(')
    assert reverse.index('"onApproval(') < reverse.index('"onTransfer(')


# --- Multi pair ---------------------------------------------------------------

def test_multi_pair_chains_branches_with_else_if(two_pair_config):
    generated = _generate(two_pair_config)
    text = generated.text

    assert generated.template_id == "multi-pair"
    assert text.count("uint256 private constant EVENT_") == 2
    assert text.count("service.subscribe(") == 2
    assert "if (log.topic_0 == EVENT_0_TOPIC_0) {" in text
    assert "} else if (log.topic_0 == EVENT_1_TOPIC_0) {" in text
    assert text.count("emit Callback(") == 2


def test_data_mapping_decodes_static_argument(two_pair_config):
    text = _generate(two_pair_config).text
    assert "abi.decode(log.data, (uint256))" in text


# --- Owner gated --------------------------------------------------------------

def test_owner_gated_embeds_owner_and_guard(transfer_config):
    transfer_config["ownerAddress"] = OWNER
    generated = _generate(transfer_config)
    text = generated.text

    assert generated.template_id == "owner-gated"
    assert "address private constant OWNER = 0x3333333333333333333333333333333333333333;" in text
    assert "owner = OWNER;" in text
    guard = "require(address(uint160(log.topic_1)) == OWNER, 'Unauthorized trigger');"
    assert guard in text
    assert text.index(guard) < text.index("log.topic_0 == EVENT_0_TOPIC_0")


# --- Pausable -----------------------------------------------------------------

def test_pausable_variant(two_pair_config):
    two_pair_config["isPausable"] = True
    generated = _generate(two_pair_config)
    text = generated.text

    assert generated.template_id == "pausable"
    assert "contract ReactiveContract is AbstractPausableReactive {" in text
    assert "bool private triggered;" in text
    assert "bool private done;" in text
    assert "assert(!done);" in text
    assert text.count("triggered = true;") == 2
    # two origin subscriptions plus the completion watch on the destination
    assert "new Subscription[](3)" in text
    assert "result[2] = Subscription(\n            DESTINATION_CHAIN_ID," in text
    assert "OWNER" not in text.split("contract ReactiveContract")[1].split("function react")[0]


def test_pausable_with_owner(transfer_config):
    transfer_config["isPausable"] = True
    transfer_config["ownerAddress"] = OWNER
    text = _generate(transfer_config).text
    assert "address private constant OWNER = 0x3333333333333333333333333333333333333333;" in text
    assert "owner = OWNER;" in text
    assert "'Unauthorized trigger'" in text


def test_non_pausable_variants_do_not_track_completion(two_pair_config):
    text = _generate(two_pair_config).text
    assert "triggered" not in text
    assert "assert(!done)" not in text


# --- Duplicate topics -----------------------------------------------------------

def test_duplicate_event_is_rejected(two_pair_config):
    two_pair_config["pairs"][1]["event"] = "Transfer(address,address,uint256)"
    with pytest.raises(GenerationError) as exc:
        _generate(two_pair_config)
    assert "Duplicate topic-0" in str(exc.value)
    assert "declared by pairs 0 and 1" in str(exc.value)


def test_duplicate_after_normalization_is_rejected(two_pair_config):
    two_pair_config["pairs"][1]["event"] = "Transfer(address, address, uint)"
    with pytest.raises(GenerationError):
        _generate(two_pair_config)


def test_colliding_topics_are_rejected_like_duplicates():
    """Different signatures resolving to one topic-0 are treated as duplicates"""
    pairs = [
        _pair("Transfer(address,address,uint256)", "a(address)"),
        _pair("Other(uint256)", "b(address)", topic0=TRANSFER_TOPIC),
    ]
    with pytest.raises(GenerationError) as exc:
        resolve_topics(pairs)
    assert "share topic-0" in str(exc.value)


def test_resolve_topics_keeps_pair_order():
    pairs = [
        _pair("Approval(address,address,uint256)", "a(address)"),
        _pair("Transfer(address,address,uint256)", "b(address)"),
    ]
    topics = resolve_topics(pairs)
    assert topics[1] == TRANSFER_TOPIC
    assert topic_constant(1) == "EVENT_1_TOPIC_0"


# --- Argument derivation ------------------------------------------------------

@pytest.mark.parametrize("param_type, source, expected", [
    ("uint256", "topic_2", "log.topic_2"),
    ("address", "topic_1", "address(uint160(log.topic_1))"),
    ("bool", "topic_3", "log.topic_3 != 0"),
    ("uint64", "block_number", "uint64(log.block_number)"),
    ("bytes32", "topic_1", "bytes32(log.topic_1)"),
    ("int256", "chain_id", "int256(log.chain_id)"),
    ("address", "contract", "log._contract"),
    ("uint256", "contract", "uint256(uint160(log._contract))"),
    ("bytes", "data", "log.data"),
    ("string", "data", "string(log.data)"),
    ("uint256", "data", "abi.decode(log.data, (uint256))"),
])
def test_argument_expression(param_type, source, expected):
    assert argument_expression(param_type, source) == expected


@pytest.mark.parametrize("param_type, source", [
    ("string", "topic_1"),
    ("bytes", "chain_id"),
    ("bool", "contract"),
])
def test_argument_expression_rejects_impossible_conversions(param_type, source):
    with pytest.raises(GenerationError):
        argument_expression(param_type, source)


def test_call_arguments_defaults():
    pair = _pair("Transfer(address,address,uint256)", "relay(address,address,address,uint256,bytes)")
    assert call_arguments(pair) == [
        "address(0)",
        "address(uint160(log.topic_1))",
        "address(uint160(log.topic_2))",
        "log.topic_3",
        "log.data",
    ]


def test_call_arguments_mapping_overrides_default():
    pair = _pair("Transfer(address,address,uint256)", "onTransfer(address,uint256)", mapping={1: "data"})
    assert call_arguments(pair) == ["address(0)", "abi.decode(log.data, (uint256))"]


def test_underivable_argument_is_rejected():
    pair = _pair("Ping()", "relay(address,uint256,uint256,uint256,uint256)")
    with pytest.raises(GenerationError) as exc:
        call_arguments(pair)
    assert "argument 4" in str(exc.value)


def test_generate_wraps_argument_errors(transfer_config):
    transfer_config["pairs"][0]["function"] = "onTransfer(address,string)"
    transfer_config["pairs"][0]["mapping"] = {"1": "topic_1"}
    with pytest.raises(GenerationError) as exc:
        _generate(transfer_config)
    assert "argument 1 of 'onTransfer(address,string)'" in str(exc.value)
