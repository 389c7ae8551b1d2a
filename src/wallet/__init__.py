"""
Wallet package - Credential storage and authentication.

Contains:
- CredentialVault: Argon2id + AES-256-GCM encrypted private key file
- SessionManager: In-memory session password
- AuthStateMachine, AuthContext: Password setup, login, logout, timeout
- Sui key decoding and address derivation
"""

from .errors import (
    WalletError,
    CryptoError,
    FormatError,
    StorageError,
    ValidationError,
    StateError,
    NetworkError,
)
from .crypto import (
    CredentialVault,
    EncryptedBlob,
    KdfParams,
    DEFAULT_KDF_PARAMS,
    encrypt_secret,
    decrypt_secret,
)
from .session import SessionManager
from .auth import (
    AuthPhase,
    AuthStateMachine,
    AuthContext,
    validate_new_password,
    check_password_strength,
    password_strength_score,
)
from .keys import (
    KeyScheme,
    SuiKeyPair,
    decode_private_key,
    derive_address,
)

__all__ = [
    # Errors
    "WalletError",
    "CryptoError",
    "FormatError",
    "StorageError",
    "ValidationError",
    "StateError",
    "NetworkError",
    # Vault
    "CredentialVault",
    "EncryptedBlob",
    "KdfParams",
    "DEFAULT_KDF_PARAMS",
    "encrypt_secret",
    "decrypt_secret",
    # Session / auth
    "SessionManager",
    "AuthPhase",
    "AuthStateMachine",
    "AuthContext",
    "validate_new_password",
    "check_password_strength",
    "password_strength_score",
    # Keys
    "KeyScheme",
    "SuiKeyPair",
    "decode_private_key",
    "derive_address",
]
