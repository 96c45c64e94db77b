"""
Wallet validation and normalization for Arweave, EVM and Solana addresses.

Formats are tried in a fixed order (EVM, Arweave, Solana) and the first match
wins. EVM addresses are returned in EIP-55 checksum form; a mixed-case input
is treated as an asserted checksum and must match exactly. Pure functions, no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from Crypto.Hash import keccak
from solders.pubkey import Pubkey

EVM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
# 32-byte SHA-256 digest, base64url without padding
ARWEAVE_ADDRESS_RE = re.compile(r"^[a-zA-Z0-9_-]{43}$")


class WalletType(str, Enum):
    ARWEAVE = "arweave"
    EVM = "evm"
    SOLANA = "solana"


@dataclass(frozen=True)
class WalletValidationResult:
    """Outcome of validate_and_normalize; normalized/wallet_type set only when valid."""

    valid: bool
    wallet_type: WalletType | None = None
    normalized: str | None = None
    error: str | None = None


def _keccak256(data: bytes) -> bytes:
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def to_checksum_address(address: str) -> str:
    """
    Convert an EVM address to EIP-55 mixed-case checksum form.

    Raises ValueError if the address is not 0x followed by 40 hex digits.
    """
    if not EVM_ADDRESS_RE.match(address):
        raise ValueError(f"Invalid EVM address: {address}")
    hex_lower = address[2:].lower()
    address_hash = _keccak256(hex_lower.encode("ascii")).hex()
    checksummed = []
    for i, char in enumerate(hex_lower):
        if char in "0123456789":
            checksummed.append(char)
        elif int(address_hash[i], 16) >= 8:
            checksummed.append(char.upper())
        else:
            checksummed.append(char)
    return "0x" + "".join(checksummed)


def _validate_evm(address: str) -> WalletValidationResult | None:
    if not EVM_ADDRESS_RE.match(address):
        return None
    hex_part = address[2:]
    checksummed = to_checksum_address(address)
    is_single_case = hex_part == hex_part.lower() or hex_part == hex_part.upper()
    if not is_single_case and address != checksummed:
        return WalletValidationResult(
            valid=False,
            error=f"Invalid EVM address checksum: {address}",
        )
    return WalletValidationResult(valid=True, wallet_type=WalletType.EVM, normalized=checksummed)


def _validate_arweave(address: str) -> WalletValidationResult | None:
    if not ARWEAVE_ADDRESS_RE.match(address):
        return None
    return WalletValidationResult(valid=True, wallet_type=WalletType.ARWEAVE, normalized=address)


def _validate_solana(address: str) -> WalletValidationResult | None:
    try:
        pubkey = Pubkey.from_string(address)
    except ValueError:
        return None
    return WalletValidationResult(valid=True, wallet_type=WalletType.SOLANA, normalized=str(pubkey))


_VALIDATORS = (_validate_evm, _validate_arweave, _validate_solana)


def validate_and_normalize(address: str) -> WalletValidationResult:
    """Classify address as EVM, Arweave or Solana and return its canonical form, or an error."""
    if not isinstance(address, str) or not address.strip():
        return WalletValidationResult(valid=False, error="Wallet address must be a non-empty string")
    address = address.strip()
    for validator in _VALIDATORS:
        result = validator(address)
        if result is not None:
            return result
    return WalletValidationResult(
        valid=False,
        error=(
            f"Invalid wallet address format: {address}. "
            "Expected Arweave (43 chars base64url), EVM (0x + 40 hex) or Solana (base58, 32 bytes)"
        ),
    )

