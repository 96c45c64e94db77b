"""
Tests for the Arweave signer: JWK loading, address derivation, data item layout.
"""

from __future__ import annotations

import hashlib
import json
import struct

import pytest
from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA
from Crypto.Signature import pss

from conftest import PROCESS_ID
from rewards_goblin.core.exceptions import StartupError
from rewards_goblin.ledger.signer import (
    ArweaveSigner,
    b64url_decode,
    b64url_encode,
    deep_hash,
    encode_tags,
    load_signer,
)
from rewards_goblin.utils.wallet_validator import WalletType, validate_and_normalize


def test_encode_tags_avro_layout():
    encoded = encode_tags([{"name": "Action", "value": "View-State"}])
    assert encoded == b"\x02" + b"\x0c" + b"Action" + b"\x14" + b"View-State" + b"\x00"


def test_encode_tags_empty():
    assert encode_tags([]) == b""


def test_deep_hash_distinguishes_list_and_blob():
    assert deep_hash(b"abc") != deep_hash([b"abc"])
    assert len(deep_hash([b"a", [b"b", b"c"]])) == 48


def test_address_is_sha256_of_modulus(rsa_jwk):
    signer = ArweaveSigner(rsa_jwk)
    expected = b64url_encode(hashlib.sha256(b64url_decode(rsa_jwk["n"])).digest())
    assert signer.address == expected
    assert len(signer.address) == 43
    assert validate_and_normalize(signer.address).wallet_type is WalletType.ARWEAVE


def test_address_hashes_unpadded_modulus_for_smaller_keys():
    key = RSA.generate(2048)

    def b64(value: int) -> str:
        return b64url_encode(value.to_bytes((value.bit_length() + 7) // 8, "big"))

    jwk = {"kty": "RSA", "n": b64(key.n), "e": b64(key.e), "d": b64(key.d), "p": b64(key.p), "q": b64(key.q)}
    signer = ArweaveSigner(jwk)
    n_bytes = key.n.to_bytes(256, "big")
    assert signer.address == b64url_encode(hashlib.sha256(n_bytes).digest())
    assert signer.address != b64url_encode(hashlib.sha256(signer.owner).digest())


def test_jwk_missing_fields_rejected(rsa_jwk):
    partial = {k: v for k, v in rsa_jwk.items() if k != "d"}
    with pytest.raises(ValueError, match="missing fields: d"):
        ArweaveSigner(partial)


def test_data_item_layout_and_signature(rsa_jwk):
    signer = ArweaveSigner(rsa_jwk)
    tags = [{"name": "Action", "value": "Award-Cheese-Mint"}, {"name": "Cheese-Mint-Id", "value": "mint-1"}]
    item = signer.create_data_item("hello", tags, target=PROCESS_ID)
    raw = item.raw

    assert struct.unpack("<H", raw[0:2])[0] == 1
    signature = raw[2:514]
    owner = raw[514:1026]
    assert owner == signer.owner
    assert raw[1026] == 1
    target = raw[1027:1059]
    assert target == b64url_decode(PROCESS_ID)
    assert raw[1059] == 0  # no anchor
    tag_count, tag_len = struct.unpack("<QQ", raw[1060:1076])
    assert tag_count == 2
    raw_tags = raw[1076:1076 + tag_len]
    assert raw_tags == encode_tags(tags)
    assert raw[1076 + tag_len:] == b"hello"

    assert item.id == b64url_encode(hashlib.sha256(signature).digest())
    message = deep_hash([b"dataitem", b"1", b"1", owner, target, b"", raw_tags, b"hello"])
    public_key = RSA.construct((int.from_bytes(owner, "big"), int.from_bytes(b64url_decode(rsa_jwk["e"]), "big")))
    pss.new(public_key, salt_bytes=32).verify(SHA256.new(message), signature)


def test_data_item_rejects_bad_target(rsa_jwk):
    signer = ArweaveSigner(rsa_jwk)
    with pytest.raises(ValueError, match="target"):
        signer.create_data_item("x", [], target="AAAA")


def test_load_signer_from_file(jwk_file, rsa_jwk):
    signer = load_signer(jwk_file)
    assert signer.address == ArweaveSigner(rsa_jwk).address


def test_load_signer_missing_file_is_fatal(tmp_path):
    with pytest.raises(StartupError, match="not found"):
        load_signer(tmp_path / "missing.json")


def test_load_signer_malformed_file_is_fatal(tmp_path):
    path = tmp_path / "wallet.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StartupError, match="could not be read"):
        load_signer(path)


def test_load_signer_non_object_is_fatal(tmp_path):
    path = tmp_path / "wallet.json"
    path.write_text(json.dumps(["n", "e"]), encoding="utf-8")
    with pytest.raises(StartupError, match="JSON object"):
        load_signer(path)
