from __future__ import annotations

import pytest

from wallet.auth import (
    PASSWORD_HASH_FILENAME,
    AuthContext,
    AuthPhase,
    AuthStateMachine,
    check_password_strength,
    describe_strength,
    password_strength_score,
    validate_new_password,
)
from wallet.errors import CryptoError, FormatError, StateError, StorageError, ValidationError
from wallet.session import SessionManager


def _machine(tmp_path, fast_kdf, clock, **kwargs) -> AuthStateMachine:
    return AuthStateMachine(tmp_path, SessionManager(), params=fast_kdf, clock=clock, **kwargs)


# ---- Password policy ----

def test_validate_rejects_empty_and_whitespace():
    with pytest.raises(ValidationError):
        validate_new_password("")
    with pytest.raises(ValidationError):
        validate_new_password("   ")


def test_validate_rejects_mismatch():
    with pytest.raises(ValidationError, match="do not match"):
        validate_new_password("Pw1", "Pw2")


def test_strength_only_when_enforced():
    validate_new_password("abc")
    with pytest.raises(ValidationError):
        validate_new_password("abc", enforce_strength=True)
    validate_new_password("Str0ng!pass", enforce_strength=True)


@pytest.mark.parametrize(
    "password,problem",
    [
        ("Ab1!", "at least"),
        ("ABCDEFG1!", "lowercase"),
        ("abcdefg1!", "uppercase"),
        ("Abcdefgh!", "digit"),
        ("Abcdefgh1", "special"),
    ],
)
def test_strength_reports_first_weakness(password, problem):
    assert problem in check_password_strength(password)


def test_strength_score():
    assert password_strength_score("") == 0
    assert password_strength_score("Str0ng!passw0rd") == 5
    assert describe_strength(0) == "Very Weak"
    assert describe_strength(5) == "Strong"


# ---- State machine ----

def test_initial_phase_without_hash(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    assert auth.phase == AuthPhase.UNAUTHENTICATED
    assert auth.needs_setup


def test_set_password_authenticates(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    auth.handle_set_password("Pw1", "Pw1")

    assert auth.phase == AuthPhase.AUTHENTICATED
    assert auth.session.get_session_password() == "Pw1"
    stored = (tmp_path / PASSWORD_HASH_FILENAME).read_text()
    assert stored.startswith("$argon2id$")
    assert "Pw1" not in stored


def test_set_password_twice_is_state_error(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    auth.handle_set_password("Pw1")
    with pytest.raises(StateError):
        auth.handle_set_password("Pw2")


def test_rejected_password_leaves_no_artifact(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    with pytest.raises(ValidationError):
        auth.handle_set_password("Pw1", "nope")
    assert auth.phase == AuthPhase.UNAUTHENTICATED
    assert not (tmp_path / PASSWORD_HASH_FILENAME).exists()


def test_restart_finds_configured_password(tmp_path, fast_kdf, clock):
    _machine(tmp_path, fast_kdf, clock).handle_set_password("Pw1")
    auth = _machine(tmp_path, fast_kdf, clock)
    assert auth.phase == AuthPhase.PASSWORD_CONFIGURED
    assert auth.session.get_session_password() is None


def test_blank_hash_file_means_first_run(tmp_path, fast_kdf, clock):
    (tmp_path / PASSWORD_HASH_FILENAME).write_text("  \n")
    assert _machine(tmp_path, fast_kdf, clock).phase == AuthPhase.UNAUTHENTICATED


def test_verify_password(tmp_path, fast_kdf, clock):
    _machine(tmp_path, fast_kdf, clock).handle_set_password("Pw1")
    auth = _machine(tmp_path, fast_kdf, clock)

    with pytest.raises(CryptoError):
        auth.handle_verify_password("wrong")
    assert auth.phase == AuthPhase.PASSWORD_CONFIGURED
    assert auth.session.get_session_password() is None

    auth.handle_verify_password("Pw1")
    assert auth.phase == AuthPhase.AUTHENTICATED
    assert auth.session.get_session_password() == "Pw1"


def test_verify_before_setup_is_state_error(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    with pytest.raises(StateError):
        auth.handle_verify_password("Pw1")


def test_corrupt_hash_is_format_error(tmp_path, fast_kdf, clock):
    (tmp_path / PASSWORD_HASH_FILENAME).write_text("not-a-phc-string")
    auth = _machine(tmp_path, fast_kdf, clock)
    with pytest.raises(FormatError):
        auth.handle_verify_password("Pw1")


def test_undecodable_hash_keeps_password_configured(tmp_path, fast_kdf, clock):
    hash_file = tmp_path / PASSWORD_HASH_FILENAME
    hash_file.write_bytes(b"\xff\xfe garbage")
    auth = _machine(tmp_path, fast_kdf, clock)

    assert auth.phase == AuthPhase.PASSWORD_CONFIGURED
    with pytest.raises(StateError):
        auth.handle_set_password("attacker")
    with pytest.raises(FormatError):
        auth.handle_verify_password("Pw1")
    assert hash_file.read_bytes() == b"\xff\xfe garbage"


def test_unreadable_hash_is_storage_error(tmp_path, fast_kdf, clock):
    # A directory in place of the file fails to read with an OSError
    (tmp_path / PASSWORD_HASH_FILENAME).mkdir()
    auth = _machine(tmp_path, fast_kdf, clock)

    assert auth.phase == AuthPhase.PASSWORD_CONFIGURED
    with pytest.raises(StorageError):
        auth.handle_verify_password("Pw1")


def test_logout_clears_session_first(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    auth.handle_set_password("Pw1")

    seen = []
    auth.handle_logout(on_logout=lambda: seen.append(auth.session.get_session_password()))

    assert seen == [None]
    assert auth.phase == AuthPhase.PASSWORD_CONFIGURED
    assert (tmp_path / PASSWORD_HASH_FILENAME).exists()


def test_logout_completes_when_cleanup_raises(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    auth.handle_set_password("Pw1")

    def broken():
        raise RuntimeError("ui gone")

    with pytest.raises(RuntimeError):
        auth.handle_logout(on_logout=broken)
    assert auth.phase == AuthPhase.PASSWORD_CONFIGURED
    assert auth.session.get_session_password() is None


def test_logout_when_logged_out_is_state_error(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock)
    with pytest.raises(StateError):
        auth.handle_logout()


def test_session_expires_after_timeout(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock, session_timeout_minutes=30)
    auth.handle_set_password("Pw1")

    clock.advance(29 * 60)
    assert not auth.is_session_expired()
    clock.advance(2 * 60)
    assert auth.is_session_expired()
    assert not auth.is_authenticated


def test_activity_extends_session(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock, session_timeout_minutes=30)
    auth.handle_set_password("Pw1")

    clock.advance(20 * 60)
    auth.extend_session()
    clock.advance(20 * 60)
    assert not auth.is_session_expired()


def test_zero_timeout_never_expires(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock, session_timeout_minutes=0)
    auth.handle_set_password("Pw1")
    clock.advance(10 * 24 * 3600)
    assert not auth.is_session_expired()


def test_expired_session_is_not_extended(tmp_path, fast_kdf, clock):
    auth = _machine(tmp_path, fast_kdf, clock, session_timeout_minutes=30)
    auth.handle_set_password("Pw1")

    clock.advance(31 * 60)
    auth.extend_session()
    assert auth.is_session_expired()

    # Logging out still works once the deadline has passed
    auth.handle_logout()
    assert auth.phase == AuthPhase.PASSWORD_CONFIGURED


# ---- Context ----

def test_key_access_requires_login(context):
    with pytest.raises(StateError):
        context.save_private_key("k")
    with pytest.raises(StateError):
        context.load_private_key()


def test_context_save_and_load(context):
    context.auth.handle_set_password("Pw1")
    context.save_private_key("K1")
    assert context.load_private_key() == "K1"
    assert context.vault.load_encrypted_private_key("Pw1") == "K1"


def test_load_after_logout_is_state_error(context):
    context.auth.handle_set_password("Pw1")
    context.save_private_key("K1")
    context.auth.handle_logout()
    with pytest.raises(StateError):
        context.load_private_key()


def test_change_password_reencrypts_key(context, tmp_path, fast_kdf, clock):
    context.auth.handle_set_password("Pw1")
    context.save_private_key("K1")

    context.change_password("Pw1", "Pw2", "Pw2")

    assert context.session.get_session_password() == "Pw2"
    assert context.vault.load_encrypted_private_key("Pw2") == "K1"
    with pytest.raises(CryptoError):
        context.vault.load_encrypted_private_key("Pw1")

    fresh = AuthContext(tmp_path, params=fast_kdf, clock=clock)
    with pytest.raises(CryptoError):
        fresh.auth.handle_verify_password("Pw1")
    fresh.auth.handle_verify_password("Pw2")


def test_change_password_wrong_old(context):
    context.auth.handle_set_password("Pw1")
    with pytest.raises(CryptoError):
        context.change_password("nope", "Pw2")
    assert context.session.get_session_password() == "Pw1"


def test_reset_password_removes_everything(context, tmp_path):
    context.auth.handle_set_password("Pw1")
    context.save_private_key("K1")
    context.auth.handle_logout()

    context.reset_password()

    assert context.auth.phase == AuthPhase.UNAUTHENTICATED
    assert not (tmp_path / PASSWORD_HASH_FILENAME).exists()
    assert not context.vault.has_encrypted_private_key()


def test_reset_while_logged_in_is_state_error(context):
    context.auth.handle_set_password("Pw1")
    with pytest.raises(StateError):
        context.reset_password()


def test_key_access_after_session_deadline_is_state_error(context, clock):
    context.auth.handle_set_password("Pw1")
    context.save_private_key("K1")

    clock.advance(31 * 60)
    with pytest.raises(StateError):
        context.save_private_key("K2")
    with pytest.raises(StateError):
        context.load_private_key()
    with pytest.raises(StateError):
        context.change_password("Pw1", "Pw2")
    assert context.vault.load_encrypted_private_key("Pw1") == "K1"


def test_change_password_rolls_back_when_reencrypt_fails(context, tmp_path, fast_kdf, clock, monkeypatch):
    context.auth.handle_set_password("Pw1")
    context.save_private_key("K1")

    def broken_save(plaintext, password):
        raise StorageError("disk full")

    monkeypatch.setattr(context.vault, "save_encrypted_private_key", broken_save)
    with pytest.raises(StorageError, match="disk full"):
        context.change_password("Pw1", "Pw2")

    assert context.session.get_session_password() == "Pw1"
    fresh = AuthContext(tmp_path, params=fast_kdf, clock=clock)
    fresh.auth.handle_verify_password("Pw1")
    assert fresh.load_private_key() == "K1"


def test_failed_rollback_reports_both_errors(context, monkeypatch):
    context.auth.handle_set_password("Pw1")
    context.save_private_key("K1")

    def broken_save(plaintext, password):
        raise StorageError("disk full")

    real_write = context.auth._write_password_hash
    writes = []

    def write_once(password_hash):
        writes.append(password_hash)
        if len(writes) > 1:
            raise StorageError("read-only filesystem")
        real_write(password_hash)

    monkeypatch.setattr(context.vault, "save_encrypted_private_key", broken_save)
    monkeypatch.setattr(context.auth, "_write_password_hash", write_once)

    with pytest.raises(StorageError) as excinfo:
        context.change_password("Pw1", "Pw2")

    message = str(excinfo.value)
    assert "disk full" in message
    assert "read-only filesystem" in message
    assert str(excinfo.value.__cause__) == "disk full"
    assert len(writes) == 2
