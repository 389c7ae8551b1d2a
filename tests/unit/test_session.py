from __future__ import annotations

from wallet.session import SessionManager


def test_starts_empty():
    session = SessionManager()
    assert session.get_session_password() is None
    assert session.has_session_password is False


def test_set_get_clear():
    session = SessionManager()
    session.set_session_password("Pw1")
    assert session.get_session_password() == "Pw1"
    assert session.has_session_password is True

    session.clear_session_password()
    assert session.get_session_password() is None
    session.clear_session_password()  # idempotent


def test_set_replaces_previous():
    session = SessionManager()
    session.set_session_password("Pw1")
    session.set_session_password("Pw2")
    assert session.get_session_password() == "Pw2"


def test_clear_zeroes_buffer():
    session = SessionManager()
    session.set_session_password("hunter2")
    buffer = session._password
    session.clear_session_password()
    assert bytes(buffer) == b"\x00" * len("hunter2")


def test_repr_hides_password():
    session = SessionManager()
    session.set_session_password("hunter2")
    assert "hunter2" not in repr(session)
