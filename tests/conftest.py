import os
import sys
import threading

import pytest


def pytest_configure():
    # Ensure `src/` is importable as top-level for `wallet.*` / `services.*` imports
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    src_path = os.path.join(root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


class FakeClock:
    def __init__(self, t: float = 1000.0) -> None:
        self.t = t

    def __call__(self) -> float:  # acts like time.monotonic
        return self.t

    def advance(self, dt: float) -> None:
        self.t += dt


class FakeBalanceClient:
    """Stands in for SuiNodeClient. Optionally blocks until released."""

    def __init__(self, amount: int = 0) -> None:
        self.amount = amount
        self.error = None
        self.calls = []
        self.gate = threading.Event()
        self.gate.set()

    def hold(self) -> None:
        self.gate.clear()

    def release(self) -> None:
        self.gate.set()

    def get_balance(self, address, network):
        self.calls.append((address, network))
        self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return self.amount


@pytest.fixture
def fast_kdf():
    from wallet.crypto import KdfParams

    # Minimum Argon2 cost keeps the suite fast
    return KdfParams(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def context(tmp_path, fast_kdf, clock):
    from wallet.auth import AuthContext

    return AuthContext(tmp_path, params=fast_kdf, clock=clock)


@pytest.fixture
def balance_client():
    return FakeBalanceClient(amount=1_500_000_000)
