"""Helpers for parsing event and function signatures.

This module contains pure functions shared by the config validator and the
contract generator. Nothing here performs I/O: topic hashes are computed
locally with Keccak-256, the same way the EVM ABI derives an event's topic-0.

Key Features:
  - Parsing ``Name(type,type,...)`` signatures into name and parameter types.
  - Normalizing type aliases (``uint`` -> ``uint256``) via eth_abi's grammar.
  - Computing topic-0 from a canonical event signature.
  - Shape checks for addresses and 32-byte hex literals.
"""
from __future__ import annotations

import re
from typing import List, NamedTuple, Tuple

from eth_abi.grammar import normalize
from eth_typing import ChecksumAddress, HexStr
from web3 import Web3

# Parameter types accepted in event and function signatures.
ALLOWED_TYPES: Tuple[str, ...] = (
    "address",
    "bool",
    "string",
    "bytes",
    "bytes32",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uint128",
    "uint256",
    "int256",
)

_SIGNATURE_RE = re.compile(r"^\s*([A-Za-z_$][A-Za-z0-9_$]*)\s*\((.*)\)\s*$")
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_BYTES32_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


class Signature(NamedTuple):
    """A parsed signature such as ``Transfer(address,address,uint256)``."""
    name: str
    types: Tuple[str, ...]

    @property
    def canonical(self) -> str:
        """The whitespace-free form used for hashing and ABI encoding."""
        return f"{self.name}({','.join(self.types)})"


class SignatureSyntaxError(ValueError):
    """Raised when a signature does not follow ``Identifier(Type(,Type)*)``."""
    pass


def parse_signature(signature: str) -> Signature:
    """Parses and normalizes an event or function signature.

    Args:
        signature: Text such as ``"Transfer(address, address, uint)"``.

    Returns:
        A Signature whose types are normalized (``uint`` becomes ``uint256``).

    Raises:
        SignatureSyntaxError: If the text is not a signature, or a parameter
            type is outside ALLOWED_TYPES.
    """
    if not isinstance(signature, str):
        raise SignatureSyntaxError(f"signature must be a string, got {type(signature).__name__}")
    match = _SIGNATURE_RE.match(signature)
    if not match:
        raise SignatureSyntaxError(f"'{signature}' is not of the form Name(type,type,...)")

    name, params = match.group(1), match.group(2).strip()
    if not params:
        return Signature(name, ())

    types: List[str] = []
    for raw in params.split(","):
        raw = raw.strip()
        if not raw:
            raise SignatureSyntaxError(f"'{signature}' has an empty parameter type")
        canonical = normalize(raw)
        if canonical not in ALLOWED_TYPES:
            raise SignatureSyntaxError(
                f"'{signature}' uses unsupported type '{raw}' "
                f"(allowed: {', '.join(ALLOWED_TYPES)})"
            )
        types.append(canonical)
    return Signature(name, tuple(types))


def event_topic(signature: str) -> HexStr:
    """Computes topic-0 for an event signature.

    The signature is canonicalized first, so ``"Transfer(address, address, uint)"``
    and ``"Transfer(address,address,uint256)"`` hash identically.

    Returns:
        A lowercase, 0x-prefixed, 64-digit hex string.
    """
    canonical = parse_signature(signature).canonical
    return HexStr(Web3.to_hex(Web3.keccak(text=canonical)))


def is_address(value: object) -> bool:
    """True for ``0x`` followed by exactly 40 hex digits (any case)."""
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def is_bytes32_hex(value: object) -> bool:
    """True for ``0x`` followed by exactly 64 hex digits (any case)."""
    return isinstance(value, str) and bool(_BYTES32_RE.match(value))


def is_identifier(value: object) -> bool:
    return isinstance(value, str) and bool(_IDENTIFIER_RE.match(value))


def checksum(address: str) -> ChecksumAddress:
    """Returns the EIP-55 form solc requires for address literals."""
    return Web3.to_checksum_address(address)
