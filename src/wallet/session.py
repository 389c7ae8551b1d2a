"""
Session - In-memory holder for the session password.

The password lives here and nowhere else for the length of one
authenticated session. It is never written to disk.
"""

from typing import Optional


class SessionManager:
    """Owns the session password between login and logout."""

    def __init__(self):
        self._password: Optional[bytearray] = None

    def set_session_password(self, password: str) -> None:
        """Store the password for this session, replacing any previous one."""
        self.clear_session_password()
        self._password = bytearray(password.encode('utf-8'))

    def get_session_password(self) -> Optional[str]:
        """
        The current session password, or None when logged out.

        Callers must not keep the returned value beyond the current operation.
        """
        if self._password is None:
            return None
        return self._password.decode('utf-8')

    @property
    def has_session_password(self) -> bool:
        return self._password is not None

    def clear_session_password(self) -> None:
        """Zero and drop the stored password."""
        if self._password is not None:
            for i in range(len(self._password)):
                self._password[i] = 0
            self._password = None

    def __repr__(self) -> str:
        state = "set" if self._password is not None else "empty"
        return f"SessionManager(password={state})"

    def __del__(self):
        """Attempt to clear sensitive data on destruction."""
        self.clear_session_password()
