"""
Wallet Errors - Error taxonomy for the credential lifecycle.

Every failure the wallet core can report maps to one of these classes so
callers can decide between "tell the user" and "this is a bug".
"""


class WalletError(Exception):
    """Base class for all wallet errors."""


class CryptoError(WalletError):
    """
    Authentication failed.

    Raised for a wrong password and for tampered ciphertext alike. The two
    cases are indistinguishable to the caller.
    """


class FormatError(WalletError):
    """A persisted blob or hash could not be parsed."""


class StorageError(WalletError):
    """Reading or writing a wallet file failed."""


class ValidationError(WalletError, ValueError):
    """Malformed user input (key, password policy, ...)."""


class StateError(WalletError):
    """Operation invoked outside its legal authentication state."""


class NetworkError(WalletError):
    """The node could not be queried."""
