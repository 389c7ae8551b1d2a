"""
Models package - Data models for the wallet.

Contains:
- WalletState: The loaded account, its network and last known balance
- Settings: JSON-persisted preferences
"""

from .wallet_state import WalletState
from .settings import Settings

__all__ = [
    "WalletState",
    "Settings",
]
