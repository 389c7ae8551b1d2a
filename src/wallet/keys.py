"""
Wallet Keys - Sui private key decoding and address derivation.

Accepted input formats:
- Bech32 (suiprivkey1...): flag byte + 32-byte secret
- Base64: flag byte + 32-byte secret (sui.keystore format), or a bare
  32-byte Ed25519 secret
- Hex: 64 characters, Ed25519 secret (with or without 0x prefix)

The address is BLAKE2b-256(flag || public_key), hex encoded with 0x.
"""

import base64
import binascii
import hashlib
import string
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from bech32 import bech32_decode, bech32_encode, convertbits
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .errors import ValidationError


SUI_PRIVATE_KEY_PREFIX = "suiprivkey"
SECRET_KEY_LENGTH = 32
ADDRESS_LENGTH = 32


class KeyScheme(IntEnum):
    """Signature scheme flag bytes used by Sui."""
    ED25519 = 0x00
    SECP256K1 = 0x01
    SECP256R1 = 0x02


class PrivateKeyFormat:
    BECH32 = "bech32"
    BASE64 = "base64"
    HEX = "hex"


@dataclass
class SuiKeyPair:
    """A decoded private key with its derived public key and address."""
    scheme: KeyScheme
    secret: bytes
    public_key: bytes

    @property
    def address(self) -> str:
        return derive_address(self.scheme, self.public_key)

    def to_bech32(self) -> str:
        """Encode as suiprivkey1... (the canonical export format)."""
        data = convertbits(bytes([self.scheme]) + self.secret, 8, 5)
        return bech32_encode(SUI_PRIVATE_KEY_PREFIX, data)

    def to_base64(self) -> str:
        """Encode as base64(flag || secret)."""
        return base64.b64encode(bytes([self.scheme]) + self.secret).decode("ascii")

    def __repr__(self) -> str:
        # Keep the secret out of logs and tracebacks
        return f"SuiKeyPair(scheme={self.scheme.name}, address={self.address})"


def derive_public_key(scheme: KeyScheme, secret: bytes) -> bytes:
    """Derive the public key for a secret under the given scheme."""
    if len(secret) != SECRET_KEY_LENGTH:
        raise ValidationError(f"Secret key must be {SECRET_KEY_LENGTH} bytes")

    if scheme == KeyScheme.ED25519:
        private_key = Ed25519PrivateKey.from_private_bytes(secret)
        return private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    curve = ec.SECP256K1() if scheme == KeyScheme.SECP256K1 else ec.SECP256R1()
    try:
        private_key = ec.derive_private_key(int.from_bytes(secret, "big"), curve)
    except ValueError as e:
        raise ValidationError("Secret key is not a valid scalar for this curve") from e
    return private_key.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint)


def derive_address(scheme: KeyScheme, public_key: bytes) -> str:
    """Sui address: BLAKE2b-256 over flag || public key."""
    digest = hashlib.blake2b(bytes([scheme]) + public_key, digest_size=ADDRESS_LENGTH)
    return "0x" + digest.hexdigest()


def detect_key_format(raw_key: str) -> Optional[str]:
    """Guess the encoding of a pasted private key."""
    key = raw_key.strip()
    if not key:
        return None
    if key.lower().startswith(SUI_PRIVATE_KEY_PREFIX + "1"):
        return PrivateKeyFormat.BECH32
    hex_part = key[2:] if key[:2] in ("0x", "0X") else key
    if len(hex_part) == 64 and all(c in string.hexdigits for c in hex_part):
        return PrivateKeyFormat.HEX
    return PrivateKeyFormat.BASE64


def _keypair_from_flagged(payload: bytes) -> SuiKeyPair:
    """Build a keypair from flag || secret."""
    if len(payload) != SECRET_KEY_LENGTH + 1:
        raise ValidationError("Private key has the wrong length")
    try:
        scheme = KeyScheme(payload[0])
    except ValueError as e:
        raise ValidationError(f"Unknown key scheme flag: {payload[0]:#04x}") from e
    secret = bytes(payload[1:])
    return SuiKeyPair(scheme, secret, derive_public_key(scheme, secret))


def decode_bech32_key(raw_key: str) -> SuiKeyPair:
    """Decode a suiprivkey1... string."""
    hrp, data = bech32_decode(raw_key.strip().lower())
    if hrp is None or data is None:
        raise ValidationError("Invalid Bech32 private key")
    if hrp != SUI_PRIVATE_KEY_PREFIX:
        raise ValidationError(f"Unexpected Bech32 prefix: {hrp}")
    payload = convertbits(data, 5, 8, False)
    if payload is None:
        raise ValidationError("Invalid Bech32 private key")
    return _keypair_from_flagged(bytes(payload))


def decode_base64_key(raw_key: str) -> SuiKeyPair:
    """Decode base64(flag || secret) or base64(secret) for Ed25519."""
    try:
        payload = base64.b64decode(raw_key.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid Base64 private key") from e

    if len(payload) == SECRET_KEY_LENGTH:
        return SuiKeyPair(KeyScheme.ED25519, payload,
                          derive_public_key(KeyScheme.ED25519, payload))
    return _keypair_from_flagged(payload)


def decode_hex_key(raw_key: str) -> SuiKeyPair:
    """Decode a 64-char hex Ed25519 secret."""
    key = raw_key.strip()
    if key[:2] in ("0x", "0X"):
        key = key[2:]
    try:
        secret = bytes.fromhex(key)
    except ValueError as e:
        raise ValidationError("Invalid hex private key") from e
    return SuiKeyPair(KeyScheme.ED25519, secret,
                      derive_public_key(KeyScheme.ED25519, secret))


def decode_private_key(raw_key: str) -> SuiKeyPair:
    """
    Decode a private key in any supported format.

    Raises:
        ValidationError: If the input is empty or not a valid key
    """
    key_format = detect_key_format(raw_key)
    if key_format is None:
        raise ValidationError("Private key is empty")
    if key_format == PrivateKeyFormat.BECH32:
        return decode_bech32_key(raw_key)
    if key_format == PrivateKeyFormat.HEX:
        return decode_hex_key(raw_key)
    return decode_base64_key(raw_key)
