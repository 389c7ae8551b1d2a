from __future__ import annotations

import base64

import pytest

from wallet.errors import ValidationError
from wallet.keys import (
    KeyScheme,
    PrivateKeyFormat,
    SuiKeyPair,
    decode_private_key,
    derive_address,
    derive_public_key,
    detect_key_format,
)


SECRET = bytes(range(1, 33))


def _keypair(scheme: KeyScheme = KeyScheme.ED25519) -> SuiKeyPair:
    return SuiKeyPair(scheme, SECRET, derive_public_key(scheme, SECRET))


def test_all_encodings_agree_on_address():
    expected = _keypair().address
    assert decode_private_key(_keypair().to_bech32()).address == expected
    assert decode_private_key(_keypair().to_base64()).address == expected
    assert decode_private_key(base64.b64encode(SECRET).decode()).address == expected
    assert decode_private_key(SECRET.hex()).address == expected
    assert decode_private_key("0x" + SECRET.hex().upper()).address == expected


def test_address_shape():
    address = _keypair().address
    assert address.startswith("0x")
    assert len(address) == 66
    int(address, 16)


def test_address_depends_on_scheme():
    ed = _keypair(KeyScheme.ED25519)
    k1 = _keypair(KeyScheme.SECP256K1)
    r1 = _keypair(KeyScheme.SECP256R1)
    assert len({ed.address, k1.address, r1.address}) == 3
    assert len(k1.public_key) == 33
    assert derive_address(KeyScheme.ED25519, ed.public_key) == ed.address


@pytest.mark.parametrize("scheme", list(KeyScheme))
def test_bech32_round_trip_keeps_scheme(scheme):
    original = _keypair(scheme)
    encoded = original.to_bech32()
    assert encoded.startswith("suiprivkey1")

    decoded = decode_private_key("  " + encoded + "\n")
    assert decoded.scheme == scheme
    assert decoded.secret == SECRET
    assert decoded.address == original.address


def test_detect_format():
    assert detect_key_format("") is None
    assert detect_key_format("   ") is None
    assert detect_key_format(_keypair().to_bech32()) == PrivateKeyFormat.BECH32
    assert detect_key_format("ab" * 32) == PrivateKeyFormat.HEX
    assert detect_key_format(_keypair().to_base64()) == PrivateKeyFormat.BASE64


@pytest.mark.parametrize(
    "raw",
    [
        "suiprivkey1notreallyakey",
        "!!!not base64!!!",
        base64.b64encode(b"\x00" * 10).decode(),
        base64.b64encode(b"\x07" + SECRET).decode(),
    ],
)
def test_invalid_keys_rejected(raw):
    with pytest.raises(ValidationError):
        decode_private_key(raw)


def test_empty_key_rejected():
    with pytest.raises(ValidationError, match="empty"):
        decode_private_key("  ")


def test_zero_scalar_rejected_for_ecdsa():
    with pytest.raises(ValidationError):
        derive_public_key(KeyScheme.SECP256K1, b"\x00" * 32)


def test_repr_hides_secret():
    text = repr(_keypair())
    assert SECRET.hex() not in text
    assert "ED25519" in text
