"""
Wallet Crypto - Password-protected storage for the private key.

Industry-standard security:
- Argon2id key derivation (memory-hard)
- AES-256-GCM authenticated encryption
- Fresh salt and nonce on every save

Keys never exist unencrypted on disk.
"""

import base64
import binascii
import logging
import os
import secrets
import struct
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Cryptography
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from argon2.exceptions import HashingError
from argon2.low_level import hash_secret_raw, Type

from .errors import CryptoError, FormatError, StorageError


logger = logging.getLogger(__name__)


# ============================================
# Security Constants
# ============================================

# Argon2id parameters (OWASP recommendations for high-security)
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536  # 64 MB
ARGON2_PARALLELISM = 4
ARGON2_HASH_LEN = 32  # 256 bits for AES-256

# Upper bounds accepted from a stored blob, so a crafted file can't
# make us allocate gigabytes
MAX_TIME_COST = 64
MAX_MEMORY_COST = 1 << 20  # 1 GB
MAX_PARALLELISM = 64

# AES-GCM constants
AES_KEY_SIZE = 32
AES_IV_SIZE = 12  # 96 bits (recommended for GCM)
AES_TAG_SIZE = 16
SALT_SIZE = 16

# Blob layout: version | time_cost | memory_cost | parallelism | salt | nonce | ct+tag
BLOB_VERSION = 1
BLOB_HEADER = struct.Struct(">BIIB")
BLOB_MIN_SIZE = BLOB_HEADER.size + SALT_SIZE + AES_IV_SIZE + AES_TAG_SIZE

ENCRYPTED_KEY_FILENAME = "encrypted_private_key.dat"

# Secure file permissions (Unix only)
SECURE_FILE_MODE = 0o600  # Owner read/write only


def set_secure_permissions(filepath: Path) -> None:
    """
    Set restrictive file permissions on Unix systems.

    Sets file to mode 0600 (owner read/write only) to protect sensitive wallet data.
    No-op on Windows (NTFS uses ACLs, not Unix permissions).
    """
    if os.name == 'posix':
        try:
            os.chmod(filepath, SECURE_FILE_MODE)
        except OSError:
            # Best effort - don't fail save operation if chmod fails
            pass


def atomic_write_text(filepath: Path, text: str) -> None:
    """
    Replace a file's contents atomically.

    Writes to a sibling temp file (already 0600), flushes it to disk and
    renames it over the target, so readers see either the old or the new
    contents, never a partial write.

    Raises:
        OSError: On any filesystem failure (temp file is cleaned up)
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)
    temp_path = filepath.with_name(filepath.name + '.tmp')
    fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, SECURE_FILE_MODE)
    try:
        with os.fdopen(fd, 'w', encoding='ascii') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        set_secure_permissions(temp_path)
        temp_path.replace(filepath)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


# ============================================
# Key Derivation
# ============================================

@dataclass(frozen=True)
class KdfParams:
    """Argon2id cost parameters."""
    time_cost: int = ARGON2_TIME_COST
    memory_cost: int = ARGON2_MEMORY_COST
    parallelism: int = ARGON2_PARALLELISM

    def is_sane(self) -> bool:
        """Check the parameters are within what we are willing to run."""
        return (
            1 <= self.time_cost <= MAX_TIME_COST
            and 8 * self.parallelism <= self.memory_cost <= MAX_MEMORY_COST
            and 1 <= self.parallelism <= MAX_PARALLELISM
        )


DEFAULT_KDF_PARAMS = KdfParams()


def derive_key(password: str, salt: bytes, params: KdfParams = DEFAULT_KDF_PARAMS) -> bytes:
    """
    Derive an encryption key from password using Argon2id.

    Argon2id is memory-hard, making brute-force attacks expensive.
    With the default parameters, each password guess requires ~64MB RAM.

    Raises:
        CryptoError: If Argon2 rejects the inputs
    """
    try:
        return hash_secret_raw(
            secret=password.encode('utf-8'),
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=ARGON2_HASH_LEN,
            type=Type.ID
        )
    except HashingError as e:
        raise CryptoError("Key derivation failed") from e


# ============================================
# Blob Format
# ============================================

@dataclass
class EncryptedBlob:
    """The persisted record: KDF parameters, salt, nonce and ciphertext+tag."""
    salt: bytes
    nonce: bytes
    ciphertext: bytes  # includes the 16-byte GCM tag
    params: KdfParams = DEFAULT_KDF_PARAMS

    def header(self) -> bytes:
        """Version and KDF parameters; also bound to the ciphertext as associated data."""
        return BLOB_HEADER.pack(
            BLOB_VERSION,
            self.params.time_cost,
            self.params.memory_cost,
            self.params.parallelism,
        )

    def to_text(self) -> str:
        """Serialize to a single base64 line."""
        raw = self.header() + self.salt + self.nonce + self.ciphertext
        return base64.b64encode(raw).decode('ascii')

    @classmethod
    def from_text(cls, text: str) -> "EncryptedBlob":
        """
        Parse the base64 line written by to_text().

        Raises:
            FormatError: If the text is not a well-formed blob
        """
        try:
            raw = base64.b64decode(text.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise FormatError("Encrypted key file is not valid base64") from e

        if len(raw) < BLOB_MIN_SIZE:
            raise FormatError("Encrypted key file is truncated")

        version, time_cost, memory_cost, parallelism = BLOB_HEADER.unpack_from(raw)
        if version != BLOB_VERSION:
            raise FormatError(f"Unsupported encrypted key version: {version}")

        params = KdfParams(time_cost, memory_cost, parallelism)
        if not params.is_sane():
            raise FormatError("Encrypted key file has invalid KDF parameters")

        offset = BLOB_HEADER.size
        salt = raw[offset:offset + SALT_SIZE]
        offset += SALT_SIZE
        nonce = raw[offset:offset + AES_IV_SIZE]
        offset += AES_IV_SIZE
        return cls(salt=salt, nonce=nonce, ciphertext=raw[offset:], params=params)


# ============================================
# Encryption
# ============================================

def encrypt_secret(plaintext: str, password: str,
                   params: KdfParams = DEFAULT_KDF_PARAMS) -> EncryptedBlob:
    """Encrypt a secret with a password under a fresh salt and nonce."""
    salt = secrets.token_bytes(SALT_SIZE)
    key = derive_key(password, salt, params)
    nonce = secrets.token_bytes(AES_IV_SIZE)

    blob = EncryptedBlob(salt=salt, nonce=nonce, ciphertext=b"", params=params)
    aesgcm = AESGCM(key)
    blob.ciphertext = aesgcm.encrypt(nonce, plaintext.encode('utf-8'), blob.header())
    return blob


def decrypt_secret(blob: EncryptedBlob, password: str) -> str:
    """
    Decrypt a blob with a password.

    Raises:
        CryptoError: If password is wrong or data is tampered
    """
    key = derive_key(password, blob.salt, blob.params)
    aesgcm = AESGCM(key)
    try:
        plaintext = aesgcm.decrypt(blob.nonce, blob.ciphertext, blob.header())
    except InvalidTag as e:
        raise CryptoError("Wrong password or corrupted key file") from e

    try:
        return plaintext.decode('utf-8')
    except UnicodeDecodeError as e:
        raise FormatError("Decrypted key is not valid text") from e


# ============================================
# Credential Vault
# ============================================

class CredentialVault:
    """
    Encrypted on-disk storage for a single private key.

    Usage:
        vault = CredentialVault(config_dir)
        vault.save_encrypted_private_key("suiprivkey1...", "my-password")
        key = vault.load_encrypted_private_key("my-password")  # None on first run
    """

    def __init__(self, directory: str | Path, params: KdfParams = DEFAULT_KDF_PARAMS):
        self.path = Path(directory) / ENCRYPTED_KEY_FILENAME
        self.params = params
        self._write_lock = threading.Lock()

    def save_encrypted_private_key(self, plaintext: str, password: str) -> None:
        """
        Encrypt and store the private key, replacing any previous blob.

        Raises:
            StorageError: If the file can't be written
            CryptoError: If key derivation fails
        """
        blob = encrypt_secret(plaintext, password, self.params)
        with self._write_lock:
            try:
                atomic_write_text(self.path, blob.to_text())
            except OSError as e:
                raise StorageError(f"Failed to write encrypted private key: {e}") from e
        logger.info("Encrypted private key saved")

    def load_encrypted_private_key(self, password: str) -> Optional[str]:
        """
        Load and decrypt the private key.

        Returns None if nothing has been saved yet.

        Raises:
            StorageError: If the file exists but can't be read
            FormatError: If the file is not a valid blob
            CryptoError: If password is wrong or the blob was tampered with
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read encrypted private key: {e}") from e

        try:
            text = raw.decode('ascii')
        except UnicodeDecodeError as e:
            raise FormatError("Encrypted key file is not valid text") from e

        blob = EncryptedBlob.from_text(text)
        return decrypt_secret(blob, password)

    def has_encrypted_private_key(self) -> bool:
        """Check if a saved key exists."""
        return self.path.exists()

    def delete_encrypted_private_key(self) -> None:
        """
        Remove the saved key, if any.

        Raises:
            StorageError: If the file exists but can't be removed
        """
        with self._write_lock:
            try:
                self.path.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(f"Failed to delete encrypted private key: {e}") from e
        logger.info("Encrypted private key deleted")
