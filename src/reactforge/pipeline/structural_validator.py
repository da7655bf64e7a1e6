"""Pattern-based structural checks for reactive contract source.

The checks are textual approximations and do not parse Solidity; type errors
are left to the compiler. Each check is an entry in a fixed rule table, so
rules can be listed and tested one at a time.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from reactforge.errors import StructuralError
from reactforge.settings import PipelineSettings
from reactforge.types import Finding, ValidationReport
from reactforge.utils.signatures import is_address, is_bytes32_hex

logger = logging.getLogger(__name__)

_CONTRACT_DECL_RE = re.compile(r"^[ \t]*contract\s+([A-Za-z_$][\w$]*)\s+is\s+([^{]+)\{", re.M)
_NEXT_DECL_RE = re.compile(
    r"^[ \t]*(?:abstract\s+contract|contract|interface|library)\s+[A-Za-z_$]", re.M
)
_REACT_RE = re.compile(r"\bfunction\s+react\s*\([^)]*\)[^;{]*\{")
_RECEIVE_RE = re.compile(r"\breceive\s*\(\s*\)[^;{]*\bpayable\b")
_SUBSCRIBE_RE = re.compile(r"\bservice\s*\.\s*subscribe\s*\(")
_TOPIC_DECL_RE = re.compile(r"\b(EVENT_\d+_TOPIC_\d+)\s*=(?!=)\s*([^;]*);")
_CHAIN_ID_RE = re.compile(r"\b\w*CHAIN_ID\s*=(?!=)\s*\d[\d_]*\s*;")
_CALLBACK_RE = re.compile(r"\bemit\s+Callback\s*\(")
_ENCODE_RE = re.compile(r"\babi\s*\.\s*encode(?:WithSignature|WithSelector|Call)\s*\(")
_ADDRESS_DECL_RE = re.compile(r"\b(ORIGIN_CONTRACT|DESTINATION_CONTRACT)\s*=(?!=)\s*([^;]*);")
_GAS_LIMIT_RE = re.compile(r"\bCALLBACK_GAS_LIMIT\s*=(?!=)\s*(\d[\d_]*)\s*;")


@dataclass(frozen=True)
class StructuralRule:
    """One entry of the rule table.

    Attributes:
        rule_id: Stable identifier reported with every finding.
        severity: "error" blocks externally supplied source; "warning" never blocks.
        check: Returns a message when the rule fails, None when it passes.
        description: What the rule enforces.
    """
    rule_id: str
    severity: str
    check: Callable[[str, PipelineSettings], Optional[str]]
    description: str


def _base_names(bases: str) -> List[str]:
    # "AbstractReactive, Foo(1)" -> ["AbstractReactive", "Foo"]
    return [part.split("(")[0].strip() for part in bases.split(",") if part.strip()]


def find_contract(source: str, allowed_bases: Tuple[str, ...]) -> Optional[re.Match]:
    """First concrete contract declaration inheriting one of `allowed_bases`."""
    for match in _CONTRACT_DECL_RE.finditer(source):
        if any(base in allowed_bases for base in _base_names(match.group(2))):
            return match
    return None


def contract_body(source: str, allowed_bases: Tuple[str, ...]) -> str:
    """
    Text of the reactive contract's declaration, up to the next top-level
    declaration. Falls back to the whole source when no contract qualifies,
    so body rules still run on partial snippets.
    """
    match = find_contract(source, allowed_bases)
    if match is None:
        return source
    following = _NEXT_DECL_RE.search(source, match.end())
    return source[match.start():following.start() if following else len(source)]


def declared_contract_name(source: str, allowed_bases: Tuple[str, ...]) -> Optional[str]:
    """Name of the reactive contract, or of the first concrete contract if none qualifies."""
    match = find_contract(source, allowed_bases) or _CONTRACT_DECL_RE.search(source)
    return match.group(1) if match else None


def check_interface(source: str, settings: PipelineSettings) -> Optional[str]:
    if find_contract(source, settings.allowed_base_contracts) is None:
        return (
            "Contract must inherit from one of: "
            + ", ".join(settings.allowed_base_contracts)
        )
    return None


def check_core_functions(source: str, settings: PipelineSettings) -> Optional[str]:
    missing = []
    if not _REACT_RE.search(source):
        missing.append("react(...)")
    if not _RECEIVE_RE.search(source):
        missing.append("receive() external payable")
    if missing:
        return "Missing required core function(s): " + ", ".join(missing)
    return None


def check_subscriptions(source: str, settings: PipelineSettings) -> Optional[str]:
    body = contract_body(source, settings.allowed_base_contracts)
    if not _SUBSCRIBE_RE.search(body):
        return "No event subscriptions found"
    malformed = [
        f"{name} ({value.strip() or 'empty'})"
        for name, value in _TOPIC_DECL_RE.findall(source)
        if not is_bytes32_hex(value.strip())
    ]
    if malformed:
        return "Invalid event topic format, expected 0x + 64 hex digits: " + ", ".join(malformed)
    return None


def check_chain_configuration(source: str, settings: PipelineSettings) -> Optional[str]:
    if not _CHAIN_ID_RE.search(source):
        return "No chain IDs defined"
    return None


def check_callback(source: str, settings: PipelineSettings) -> Optional[str]:
    body = contract_body(source, settings.allowed_base_contracts)
    if not _CALLBACK_RE.search(body):
        return "No callback emissions found"
    if not _ENCODE_RE.search(body):
        return "Callback payload not properly encoded (use abi.encodeWithSignature)"
    return None


def check_addresses(source: str, settings: PipelineSettings) -> Optional[str]:
    declared = _ADDRESS_DECL_RE.findall(source)
    if not declared:
        return "No ORIGIN_CONTRACT or DESTINATION_CONTRACT address defined"
    invalid = [
        f"{name} ({value.strip() or 'empty'})"
        for name, value in declared
        if not is_address(value.strip())
    ]
    if invalid:
        return "Invalid contract addresses defined: " + ", ".join(invalid)
    return None


def check_gas_limits(source: str, settings: PipelineSettings) -> Optional[str]:
    out_of_range = []
    for raw in _GAS_LIMIT_RE.findall(source):
        gas_limit = int(raw.replace("_", ""))
        if not settings.min_gas_limit <= gas_limit <= settings.max_gas_limit:
            out_of_range.append(str(gas_limit))
    if out_of_range:
        return (
            f"Gas limit {', '.join(out_of_range)} is outside recommended range "
            f"({settings.min_gas_limit}-{settings.max_gas_limit})"
        )
    return None


RULES: Tuple[StructuralRule, ...] = (
    StructuralRule("interface", "error", check_interface,
                   "declares a contract inheriting an allowed reactive base"),
    StructuralRule("core-functions", "error", check_core_functions,
                   "implements react() and can receive funds"),
    StructuralRule("subscriptions", "error", check_subscriptions,
                   "subscribes to at least one event; topic constants are 32-byte hex"),
    StructuralRule("chain-config", "error", check_chain_configuration,
                   "declares at least one chain id constant"),
    StructuralRule("callback", "error", check_callback,
                   "emits Callback with an ABI-encoded payload"),
    StructuralRule("addresses", "error", check_addresses,
                   "origin/destination address constants are 40-hex-digit literals"),
    StructuralRule("gas-limit", "warning", check_gas_limits,
                   "callback gas limit lies within the recommended envelope"),
)


class StructuralValidator:
    """Runs the rule table against a source text."""

    def __init__(
        self,
        settings: Optional[PipelineSettings] = None,
        rules: Tuple[StructuralRule, ...] = RULES,
    ) -> None:
        self._settings = settings or PipelineSettings()
        self._rules = rules

    @property
    def rules(self) -> Tuple[StructuralRule, ...]:
        return self._rules

    def check(self, source: str) -> ValidationReport:
        """
        Check `source` against every rule.

        Args:
            source: Generated or hand-edited contract source.

        Returns:
            A fresh ValidationReport; every finding names its rule.
        """
        findings = []
        for rule in self._rules:
            message = rule.check(source, self._settings)
            if message is not None:
                findings.append(Finding(rule=rule.rule_id, severity=rule.severity, message=message))

        report = ValidationReport(findings=findings)
        if findings:
            logger.debug("Structural findings: %s", "; ".join(str(f) for f in findings))
        return report

    def enforce(self, source: str) -> ValidationReport:
        """
        Like `check`, but any error-severity finding is fatal.

        Raises:
            StructuralError: Carrying the full report.
        """
        report = self.check(source)
        if not report.is_valid:
            raise StructuralError(report)
        return report

    def contract_name(self, source: str) -> Optional[str]:
        return declared_contract_name(source, self._settings.allowed_base_contracts)
