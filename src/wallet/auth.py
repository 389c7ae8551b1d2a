"""
Wallet Auth - Password setup, login, logout and session lifetime.

Lifecycle:
    UNAUTHENTICATED --set_password--> AUTHENTICATED
    PASSWORD_CONFIGURED --verify_password--> AUTHENTICATED
    AUTHENTICATED --logout--> PASSWORD_CONFIGURED

The login password is stored as an Argon2id PHC string in password.hash,
next to the encrypted key blob.
"""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .crypto import (
    CredentialVault, KdfParams, DEFAULT_KDF_PARAMS, atomic_write_text,
)
from .errors import CryptoError, FormatError, StateError, StorageError, ValidationError
from .session import SessionManager


logger = logging.getLogger(__name__)

PASSWORD_HASH_FILENAME = "password.hash"
DEFAULT_SESSION_TIMEOUT_MINUTES = 30
MIN_STRONG_PASSWORD_LENGTH = 8

INVALID_CREDENTIALS = "Invalid credentials"


class AuthPhase(Enum):
    UNAUTHENTICATED = "unauthenticated"        # no password ever set
    PASSWORD_CONFIGURED = "password_configured"
    AUTHENTICATED = "authenticated"


# ============================================
# Password Policy
# ============================================

def check_password_strength(password: str) -> Optional[str]:
    """
    Check a password against the strong-password policy.

    Returns:
        A description of the first weakness found, or None if acceptable
    """
    if len(password) < MIN_STRONG_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_STRONG_PASSWORD_LENGTH} characters long"
    if not any(c.islower() for c in password):
        return "Password must contain at least one lowercase letter"
    if not any(c.isupper() for c in password):
        return "Password must contain at least one uppercase letter"
    if not any(c.isdigit() for c in password):
        return "Password must contain at least one digit"
    if all(c.isalnum() for c in password):
        return "Password must contain at least one special character"
    return None


def password_strength_score(password: str) -> int:
    """Score a password from 0 (very weak) to 5 (strong)."""
    score = 0
    if len(password) >= 8:
        score += 1
    if len(password) >= 12:
        score += 1
    if any(c.islower() for c in password):
        score += 1
    if any(c.isupper() for c in password):
        score += 1
    if any(c.isdigit() for c in password):
        score += 1
    if any(not c.isalnum() for c in password):
        score += 1
    return min(score, 5)


def describe_strength(score: int) -> str:
    if score <= 1:
        return "Very Weak"
    return {2: "Weak", 3: "Fair", 4: "Good"}.get(score, "Strong")


def validate_new_password(password: str, confirm: Optional[str] = None,
                          enforce_strength: bool = False) -> None:
    """
    Validate a password that is about to be set.

    Raises:
        ValidationError: Empty, mismatched confirmation, or too weak
    """
    if not password or not password.strip():
        raise ValidationError("Password cannot be empty")
    if confirm is not None and password != confirm:
        raise ValidationError("Passwords do not match")
    if enforce_strength:
        weakness = check_password_strength(password)
        if weakness:
            raise ValidationError(weakness)


# ============================================
# Auth State Machine
# ============================================

class AuthStateMachine:
    """
    Tracks the authentication phase and guards which operations are legal.

    Every transition that authenticates also hands the password to the
    SessionManager; logout takes it away again before anything else happens.
    """

    def __init__(
        self,
        directory: str | Path,
        session: SessionManager,
        params: KdfParams = DEFAULT_KDF_PARAMS,
        session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES,
        enforce_strength: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.password_file = Path(directory) / PASSWORD_HASH_FILENAME
        self.session = session
        self.session_timeout_minutes = session_timeout_minutes
        self.enforce_strength = enforce_strength
        self._clock = clock
        self._hasher = PasswordHasher(
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
        )
        self._session_deadline: Optional[float] = None

        self.stored_password_hash: Optional[str] = None
        try:
            self.stored_password_hash = self._read_password_hash()
        except (FormatError, StorageError) as e:
            # The file exists, so a password was set; login will report it
            logger.error(f"Password hash unusable: {e}")
            self._phase = AuthPhase.PASSWORD_CONFIGURED
        else:
            if self.stored_password_hash is None:
                self._phase = AuthPhase.UNAUTHENTICATED
            else:
                self._phase = AuthPhase.PASSWORD_CONFIGURED

    # ---- State ----

    @property
    def phase(self) -> AuthPhase:
        return self._phase

    @property
    def needs_setup(self) -> bool:
        """True until a password has been set for the first time."""
        return self._phase == AuthPhase.UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self._phase == AuthPhase.AUTHENTICATED and not self.is_session_expired()

    def require(self, phase: AuthPhase, operation: str, allow_expired: bool = False) -> None:
        """
        Raise StateError unless we are in the given phase.

        An AUTHENTICATED session past its deadline does not count as
        authenticated, even before the control loop has logged it out.

        Raises:
            StateError: If the current phase differs, or the session expired
        """
        if self._phase != phase:
            raise StateError(
                f"{operation} requires {phase.value}, current state is {self._phase.value}"
            )
        if phase == AuthPhase.AUTHENTICATED and not allow_expired and self.is_session_expired():
            raise StateError(f"{operation} requires {phase.value}, session has expired")

    # ---- Session timeout ----

    def _start_session(self) -> None:
        if self.session_timeout_minutes > 0:
            self._session_deadline = self._clock() + self.session_timeout_minutes * 60
        else:
            self._session_deadline = None

    def is_session_expired(self) -> bool:
        if self._phase != AuthPhase.AUTHENTICATED or self._session_deadline is None:
            return False
        return self._clock() > self._session_deadline

    def extend_session(self) -> None:
        """Restart the session window (call on user activity)."""
        if self.is_authenticated:
            self._start_session()

    # ---- Password artifact ----

    def _read_password_hash(self) -> Optional[str]:
        """
        Read password.hash. None means no password was ever set.

        Raises:
            FormatError: If the file isn't UTF-8 text
            StorageError: If the file exists but can't be read
        """
        try:
            text = self.password_file.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise FormatError("Stored password hash is corrupt") from e
        except OSError as e:
            raise StorageError(f"Failed to read password hash: {e}") from e
        text = text.strip()
        return text or None

    def _write_password_hash(self, password_hash: str) -> None:
        try:
            atomic_write_text(self.password_file, password_hash)
        except OSError as e:
            raise StorageError(f"Failed to write password hash: {e}") from e
        self.stored_password_hash = password_hash

    def _check_password(self, password: str) -> bool:
        """
        Verify a password against the stored hash.

        Raises:
            FormatError: If the stored hash can't be decoded or parsed
            StorageError: If the hash file can't be read
        """
        if self.stored_password_hash is None:
            # Hash may have been written by another process since startup
            self.stored_password_hash = self._read_password_hash()
        if self.stored_password_hash is None:
            return False
        try:
            return self._hasher.verify(self.stored_password_hash, password)
        except VerifyMismatchError:
            return False
        except InvalidHashError as e:
            raise FormatError("Stored password hash is corrupt") from e
        except VerificationError:
            return False

    # ---- Transitions ----

    def handle_set_password(self, password: str, confirm: Optional[str] = None) -> None:
        """
        Set the first password and authenticate the session that set it.

        Raises:
            StateError: If a password is already configured
            ValidationError: If the password is rejected by policy
            StorageError: If the hash can't be persisted
        """
        self.require(AuthPhase.UNAUTHENTICATED, "set_password")
        validate_new_password(password, confirm, self.enforce_strength)

        self._write_password_hash(self._hasher.hash(password))
        self._phase = AuthPhase.PASSWORD_CONFIGURED
        logger.info("Password configured")
        self._authenticate(password)

    def handle_verify_password(self, password: str) -> None:
        """
        Log in with the configured password.

        Raises:
            StateError: If not in PASSWORD_CONFIGURED
            CryptoError: If the password does not match
            FormatError: If the stored hash is corrupt
            StorageError: If the stored hash can't be read
        """
        self.require(AuthPhase.PASSWORD_CONFIGURED, "verify_password")
        if not self._check_password(password):
            logger.info("Login rejected")
            raise CryptoError(INVALID_CREDENTIALS)
        self._authenticate(password)

    def _authenticate(self, password: str) -> None:
        self.session.set_session_password(password)
        self._phase = AuthPhase.AUTHENTICATED
        self._start_session()
        logger.info("Session authenticated")

    def handle_logout(self, on_logout: Optional[Callable[[], None]] = None) -> None:
        """
        End the session.

        The session password is cleared before anything else. The phase
        moves back to PASSWORD_CONFIGURED even if on_logout raises. Neither
        the password hash nor the encrypted key is touched.

        Raises:
            StateError: If not authenticated
        """
        # An expired session must still be able to log out
        self.require(AuthPhase.AUTHENTICATED, "logout", allow_expired=True)
        self.session.clear_session_password()
        try:
            if on_logout is not None:
                on_logout()
        finally:
            self._phase = AuthPhase.PASSWORD_CONFIGURED
            self._session_deadline = None
            logger.info("Logged out")

    def change_password(self, old_password: str, new_password: str,
                        confirm: Optional[str] = None,
                        vault: Optional[CredentialVault] = None) -> None:
        """
        Replace the password, re-encrypting the saved key if a vault is given.

        Raises:
            StateError: If not authenticated
            CryptoError: If old_password is wrong
            ValidationError: If new_password is rejected by policy
            StorageError: If a write fails; names both errors if the
                rollback to the old hash fails too
        """
        self.require(AuthPhase.AUTHENTICATED, "change_password")
        if not self._check_password(old_password):
            raise CryptoError(INVALID_CREDENTIALS)
        validate_new_password(new_password, confirm, self.enforce_strength)

        saved_key = vault.load_encrypted_private_key(old_password) if vault is not None else None

        old_hash = self.stored_password_hash
        self._write_password_hash(self._hasher.hash(new_password))
        if saved_key is not None:
            try:
                vault.save_encrypted_private_key(saved_key, new_password)
            except (StorageError, CryptoError) as e:
                # Key is still under the old password; keep the hash matching it
                logger.error(f"Re-encrypting saved key failed, restoring old password: {e}")
                try:
                    self._write_password_hash(old_hash)
                except StorageError as rollback_error:
                    logger.error(f"Restoring old password hash failed: {rollback_error}")
                    raise StorageError(
                        f"Password change failed ({e}) and the old password "
                        f"could not be restored ({rollback_error})"
                    ) from e
                raise

        self.session.set_session_password(new_password)
        self._start_session()
        logger.info("Password changed")

    def reset_password(self, vault: Optional[CredentialVault] = None) -> None:
        """
        Forget the password entirely (and the key it protects).

        Only allowed while logged out, as a "forgot password" escape hatch.

        Raises:
            StateError: If not in PASSWORD_CONFIGURED
            StorageError: If the files can't be removed
        """
        self.require(AuthPhase.PASSWORD_CONFIGURED, "reset_password")
        if vault is not None:
            vault.delete_encrypted_private_key()
        try:
            self.password_file.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to remove password file: {e}") from e
        self.stored_password_hash = None
        self._phase = AuthPhase.UNAUTHENTICATED
        logger.info("Password reset")


# ============================================
# Auth Context
# ============================================

class AuthContext:
    """
    Everything authentication-related for one config directory.

    Built once at startup and passed to whoever needs it; there is no
    module-level auth state.
    """

    def __init__(
        self,
        directory: str | Path,
        params: KdfParams = DEFAULT_KDF_PARAMS,
        session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES,
        enforce_strength: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.directory = Path(directory)
        self.session = SessionManager()
        self.vault = CredentialVault(self.directory, params)
        self.auth = AuthStateMachine(
            self.directory,
            self.session,
            params=params,
            session_timeout_minutes=session_timeout_minutes,
            enforce_strength=enforce_strength,
            clock=clock,
        )

    def _session_password(self, operation: str) -> str:
        self.auth.require(AuthPhase.AUTHENTICATED, operation)
        password = self.session.get_session_password()
        if password is None:
            raise StateError(f"{operation} requires a session password")
        return password

    def save_private_key(self, plaintext: str) -> None:
        """
        Encrypt the key under the session password.

        Raises:
            StateError: If not authenticated
            StorageError, CryptoError: From the vault
        """
        self.vault.save_encrypted_private_key(plaintext, self._session_password("save_private_key"))

    def load_private_key(self) -> Optional[str]:
        """
        Decrypt the saved key with the session password.

        Raises:
            StateError: If not authenticated
            StorageError, FormatError, CryptoError: From the vault
        """
        return self.vault.load_encrypted_private_key(self._session_password("load_private_key"))

    def change_password(self, old_password: str, new_password: str,
                        confirm: Optional[str] = None) -> None:
        self.auth.change_password(old_password, new_password, confirm, vault=self.vault)

    def reset_password(self) -> None:
        self.auth.reset_password(vault=self.vault)
