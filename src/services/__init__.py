"""
Services package - Backend services for the wallet.

Contains:
- BalanceFetcher: Single-flight background balance refresh
- WalletController: Auth, key storage and balance orchestration
"""

from .balance import BalanceClient, BalanceFetcher, BalanceResult
from .controller import WalletController

__all__ = [
    "BalanceClient",
    "BalanceFetcher",
    "BalanceResult",
    "WalletController",
]
