"""
Arweave wallet signer: load a JWK, derive the wallet address, build signed
ANS-104 data items for AO messages.

Data item layout (signature type 1, RSA-PSS/SHA-256):
    2 sig type | 512 signature | 512 owner | 1+32 target | 1+32 anchor
    | 8 tag count | 8 tag bytes length | avro tags | data
The signature covers the SHA-384 deep hash of the item fields; the item id
is base64url(sha256(signature)).
"""

from __future__ import annotations

import base64
import hashlib
import json
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA
from Crypto.Signature import pss

from rewards_goblin.core.exceptions import StartupError
from rewards_goblin.rewards_logging import get_logger

logger = get_logger(__name__)

SIGNATURE_TYPE_ARWEAVE = 1
SIGNATURE_LENGTH = 512
OWNER_LENGTH = 512
TARGET_LENGTH = 32
ANCHOR_LENGTH = 32
PSS_SALT_LENGTH = 32
JWK_REQUIRED_FIELDS = ("n", "e", "d", "p", "q")

Tag = dict[str, str]


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _b64url_to_int(value: str) -> int:
    return int.from_bytes(b64url_decode(value), "big")


def _avro_long(n: int) -> bytes:
    """Avro zigzag varint encoding of a (non-negative) long."""
    n = (n << 1) ^ (n >> 63)
    out = bytearray()
    while n & ~0x7F:
        out.append((n & 0x7F) | 0x80)
        n >>= 7
    out.append(n)
    return bytes(out)


def encode_tags(tags: list[Tag]) -> bytes:
    """Avro-encode tags as an array of {name, value} byte records. Empty list -> b''."""
    if not tags:
        return b""
    out = bytearray(_avro_long(len(tags)))
    for tag in tags:
        for key in ("name", "value"):
            raw = str(tag[key]).encode("utf-8")
            out += _avro_long(len(raw))
            out += raw
    out += _avro_long(0)
    return bytes(out)


def deep_hash(chunk: bytes | list[Any]) -> bytes:
    """Arweave deep hash (SHA-384) of a blob or nested list of blobs."""
    if isinstance(chunk, list):
        acc = hashlib.sha384(b"list" + str(len(chunk)).encode("ascii")).digest()
        for item in chunk:
            acc = hashlib.sha384(acc + deep_hash(item)).digest()
        return acc
    tag = hashlib.sha384(b"blob" + str(len(chunk)).encode("ascii")).digest()
    return hashlib.sha384(tag + hashlib.sha384(chunk).digest()).digest()


@dataclass(frozen=True)
class DataItem:
    """Signed ANS-104 data item ready for upload."""

    id: str
    raw: bytes


class ArweaveSigner:
    """
    Signs AO messages with an Arweave RSA JWK.

    address is base64url(sha256(modulus)), the wallet address that the
    ledger's ACL refers to.
    """

    def __init__(self, jwk: dict[str, Any]) -> None:
        missing = [k for k in JWK_REQUIRED_FIELDS if not jwk.get(k)]
        if missing:
            raise ValueError(f"JWK missing fields: {', '.join(missing)}")
        try:
            self._key = RSA.construct(tuple(_b64url_to_int(jwk[k]) for k in JWK_REQUIRED_FIELDS))
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid RSA JWK: {e}") from e
        self._owner = self._key.n.to_bytes(OWNER_LENGTH, "big")
        # Address hashes the modulus as encoded in the JWK, unpadded
        self._address = b64url_encode(hashlib.sha256(b64url_decode(jwk["n"])).digest())

    @property
    def address(self) -> str:
        return self._address

    @property
    def owner(self) -> bytes:
        return self._owner

    def sign(self, message: bytes) -> bytes:
        return pss.new(self._key, salt_bytes=PSS_SALT_LENGTH).sign(SHA256.new(message))

    def create_data_item(
        self,
        data: bytes | str,
        tags: list[Tag],
        *,
        target: str | None = None,
        anchor: str | None = None,
    ) -> DataItem:
        """Build and sign a data item addressed to target (a process id)."""
        raw_data = data.encode("utf-8") if isinstance(data, str) else data
        raw_target = b64url_decode(target) if target else b""
        if raw_target and len(raw_target) != TARGET_LENGTH:
            raise ValueError(f"target must decode to {TARGET_LENGTH} bytes")
        raw_anchor = anchor.encode("utf-8") if anchor else b""
        if raw_anchor and len(raw_anchor) != ANCHOR_LENGTH:
            raise ValueError(f"anchor must be {ANCHOR_LENGTH} bytes")
        raw_tags = encode_tags(tags)

        signature_data = deep_hash([
            b"dataitem",
            b"1",
            str(SIGNATURE_TYPE_ARWEAVE).encode("ascii"),
            self._owner,
            raw_target,
            raw_anchor,
            raw_tags,
            raw_data,
        ])
        signature = self.sign(signature_data)

        buf = bytearray(struct.pack("<H", SIGNATURE_TYPE_ARWEAVE))
        buf += signature
        buf += self._owner
        buf += (b"\x01" + raw_target) if raw_target else b"\x00"
        buf += (b"\x01" + raw_anchor) if raw_anchor else b"\x00"
        buf += struct.pack("<Q", len(tags))
        buf += struct.pack("<Q", len(raw_tags))
        buf += raw_tags
        buf += raw_data
        item_id = b64url_encode(hashlib.sha256(signature).digest())
        return DataItem(id=item_id, raw=bytes(buf))


def load_signer(jwk_path: str | Path) -> ArweaveSigner:
    """Load the wallet JWK from disk. Missing or malformed key files are fatal (StartupError)."""
    path = Path(jwk_path)
    try:
        jwk = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise StartupError(f"Wallet JWK not found at {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise StartupError(f"Wallet JWK at {path} could not be read: {e}") from e
    if not isinstance(jwk, dict):
        raise StartupError(f"Wallet JWK at {path} must be a JSON object")
    try:
        signer = ArweaveSigner(jwk)
    except ValueError as e:
        logger.error("wallet_jwk_load_failed", jwk_path=str(path), error=str(e))
        raise StartupError(f"Invalid wallet JWK at {path}: {e}") from e
    logger.info("wallet_jwk_loaded", jwk_path=str(path), wallet_address=signer.address)
    return signer
