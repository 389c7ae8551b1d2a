"""
Wallet state model.

The mutable view of the loaded wallet that the UI renders. Only the control
loop mutates it: directly for user actions, and through
BalanceFetcher.handle_async_results for completed fetches.

Generation lifecycle:
- bumped on import, clear, logout and network switch
- every fetch remembers the generation it started under
- a result from an older generation is dropped on delivery
- loading is per generation; BalanceFetcher itself keeps the older
  worker counted until its result is drained
"""

from dataclasses import dataclass
from typing import Optional

from networks import Network, DEFAULT_NETWORK


@dataclass
class WalletState:
    """Address, network and balance of the loaded wallet."""
    address: Optional[str] = None
    network: Network = DEFAULT_NETWORK
    balance: Optional[int] = None        # MIST (9 decimals: 1_000_000_000 = 1 SUI)
    loading: bool = False                # a fetch is running or queued for this wallet
    last_error: Optional[str] = None
    generation: int = 0

    @property
    def is_loaded(self) -> bool:
        return self.address is not None

    def load(self, address: str) -> None:
        """Point the state at a newly imported wallet."""
        self.generation += 1
        self.address = address
        self.balance = None
        self.loading = False
        self.last_error = None

    def set_network(self, network: Network) -> None:
        """Switch network; the old balance means nothing on the new one."""
        self.generation += 1
        self.network = network
        self.balance = None
        self.loading = False
        self.last_error = None

    def reset(self) -> None:
        """Back to the empty state (logout / clear wallet). Network is kept."""
        self.generation += 1
        self.address = None
        self.balance = None
        self.loading = False
        self.last_error = None
