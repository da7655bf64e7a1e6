"""Initializes the reactforge utilities sub-package.

Available Utilities:
  - signatures: Parsing and normalizing event/function signatures, topic-0
    hashing and literal shape checks.
  - solc: SolcBackend, which resolves a pinned solc binary through py-solc-x
    and runs it in standard-JSON mode under a timeout.
"""
from .signatures import (
    ALLOWED_TYPES,
    Signature,
    SignatureSyntaxError,
    parse_signature,
    event_topic,
    is_address,
    is_bytes32_hex,
    is_identifier,
    checksum,
)
from .solc import SolcBackend

__all__ = [
    # from .signatures
    "ALLOWED_TYPES",
    "Signature",
    "SignatureSyntaxError",
    "parse_signature",
    "event_topic",
    "is_address",
    "is_bytes32_hex",
    "is_identifier",
    "checksum",
    # from .solc
    "SolcBackend",
]
