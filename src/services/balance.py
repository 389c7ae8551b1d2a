"""
Balance Service - Single-flight background balance refresh.

A refresh runs the node query on a worker thread. The worker never touches
WalletState: it puts a BalanceResult on a queue, and the control loop
applies it in handle_async_results() on its next tick.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Optional, Protocol

from models.wallet_state import WalletState
from networks import Network
from wallet.errors import NetworkError


logger = logging.getLogger(__name__)


class BalanceClient(Protocol):
    """Anything that can look up a balance (SuiNodeClient in production)."""

    def get_balance(self, address: str, network: Network) -> int:
        ...


@dataclass
class BalanceResult:
    """Outcome of one fetch, tagged with the wallet it was started for."""
    generation: int
    address: str
    network: Network
    amount: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BalanceFetcher:
    """
    Runs at most one balance query at a time.

    The worker counts as outstanding until its result has been drained, even
    when the wallet moved on (new generation) in the meantime. A refresh
    requested while a stale worker is outstanding is deferred and started
    from handle_async_results once that worker's result is discarded.
    """

    def __init__(self, client: BalanceClient):
        self.client = client
        self._results: "queue.Queue[BalanceResult]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._pending = False

    def handle_refresh_balance(self, state: WalletState) -> bool:
        """
        Start a fetch for the loaded wallet.

        Returns:
            True if a fetch was started or queued behind an outstanding
            one; False if this wallet already has a fetch in flight or no
            wallet is loaded (state is left untouched then)
        """
        if state.loading:
            logger.debug("Balance refresh ignored, fetch already in flight")
            return False
        if state.address is None:
            logger.info("Balance refresh ignored, no wallet loaded")
            return False

        state.loading = True
        if self._worker is not None:
            logger.debug("Balance refresh deferred until the previous fetch returns")
            self._pending = True
            return True

        self._start(state)
        return True

    def _start(self, state: WalletState) -> None:
        self._pending = False
        self._worker = threading.Thread(
            target=self._run,
            args=(state.generation, state.address, state.network),
            name=f"balance-{state.network.value}",
            daemon=True,
        )
        self._worker.start()

    def _run(self, generation: int, address: str, network: Network) -> None:
        result = BalanceResult(generation=generation, address=address, network=network)
        try:
            result.amount = int(self.client.get_balance(address, network))
        except NetworkError as e:
            result.error = str(e)
        except Exception as e:
            logger.warning(f"Balance fetch error: {e}")
            result.error = str(e) or type(e).__name__
        self._results.put(result)

    def handle_async_results(self, state: WalletState) -> int:
        """
        Apply finished fetches to the state. Call once per control-loop tick.

        Results for a wallet that has since been replaced, cleared or moved
        to another network are discarded. If a refresh was deferred behind
        such a result, it is started here for the current wallet.

        Returns:
            Number of results applied
        """
        applied = 0
        while True:
            try:
                result = self._results.get_nowait()
            except queue.Empty:
                break

            # The worker has already posted, so this join returns at once
            if self._worker is not None:
                self._worker.join()
                self._worker = None

            if (result.generation != state.generation
                    or result.address != state.address
                    or result.network != state.network):
                logger.debug("Discarding stale balance result")
                continue

            state.loading = False
            if result.ok:
                state.balance = result.amount
                state.last_error = None
            else:
                # Keep showing the last good balance
                state.last_error = result.error
                logger.warning(f"Balance refresh failed: {result.error}")
            applied += 1

        if self._pending and self._worker is None:
            self._pending = False
            if state.loading and state.is_loaded:
                self._start(state)
        return applied

    @property
    def in_flight(self) -> int:
        """Number of worker threads still running (0 or 1)."""
        return 1 if self._worker is not None and self._worker.is_alive() else 0

    @property
    def busy(self) -> bool:
        """True until the outstanding worker's result has been drained."""
        return self._worker is not None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the outstanding worker has finished (tests and shutdown).

        Returns:
            True if no worker is left running
        """
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
        return self.in_flight == 0

    def shutdown(self, timeout: float = 2.0) -> None:
        """Give an outstanding fetch a moment to finish before exit."""
        self._pending = False
        if not self.wait(timeout):
            logger.info("Exiting with balance fetch still in flight")
