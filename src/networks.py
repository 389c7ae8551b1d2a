"""
Sui Networks - Network configurations and balance fetching

Supports Sui Devnet, Testnet and Mainnet.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Optional

from web3 import HTTPProvider

from wallet.errors import NetworkError, ValidationError


logger = logging.getLogger(__name__)

# ============================================
# Network Configurations
# ============================================

SUI_COIN_TYPE = "0x2::sui::SUI"
SUI_DECIMALS = 9  # 1 SUI = 10^9 MIST
SUI_SYMBOL = "SUI"

RPC_TIMEOUT_SECONDS = 15


class Network(Enum):
    """Supported Sui networks."""
    DEVNET = "devnet"
    TESTNET = "testnet"
    MAINNET = "mainnet"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()

    @property
    def short_name(self) -> str:
        return {"devnet": "DEV", "testnet": "TEST", "mainnet": "MAIN"}[self.value]

    @property
    def rpc_url(self) -> str:
        """Default public full node for this network."""
        return f"https://fullnode.{self.value}.sui.io:443"

    @property
    def is_testnet(self) -> bool:
        return self != Network.MAINNET

    @property
    def explorer_url(self) -> str:
        if self == Network.MAINNET:
            return "https://suiscan.xyz/mainnet"
        return f"https://suiscan.xyz/{self.value}"

    def address_explorer_url(self, address: str) -> str:
        return f"{self.explorer_url}/account/{address}"

    def transaction_explorer_url(self, digest: str) -> str:
        return f"{self.explorer_url}/tx/{digest}"

    @classmethod
    def parse(cls, name: str) -> Optional["Network"]:
        """Parse a network name ("devnet", "dev", "Mainnet", ...)."""
        aliases = {"dev": cls.DEVNET, "test": cls.TESTNET, "main": cls.MAINNET}
        key = name.strip().lower()
        if key in aliases:
            return aliases[key]
        for network in cls:
            if network.value == key:
                return network
        return None


# Default network
DEFAULT_NETWORK = Network.DEVNET


# ============================================
# Node Client
# ============================================

class SuiNodeClient:
    """Queries Sui full nodes over JSON-RPC."""

    def __init__(self, custom_rpcs: Optional[dict[Network, str]] = None):
        """
        Initialize node client.

        Args:
            custom_rpcs: Dict of network -> custom RPC URL (optional)
        """
        self.custom_rpcs = dict(custom_rpcs or {})
        self._providers: dict[Network, HTTPProvider] = {}

    def rpc_url(self, network: Network) -> str:
        """The RPC URL in effect for a network."""
        return self.custom_rpcs.get(network) or network.rpc_url

    def set_custom_rpcs(self, custom_rpcs: dict[Network, str]) -> None:
        self.custom_rpcs = dict(custom_rpcs)
        self._providers.clear()

    def _provider(self, network: Network) -> HTTPProvider:
        if network not in self._providers:
            self._providers[network] = HTTPProvider(
                self.rpc_url(network),
                request_kwargs={"timeout": RPC_TIMEOUT_SECONDS},
            )
        return self._providers[network]

    def _call(self, network: Network, method: str, params: list):
        try:
            response = self._provider(network).make_request(method, params)
        except Exception as e:
            logger.debug(f"{method} to {self.rpc_url(network)} failed: {e}")
            raise NetworkError(f"{network.display_name} node unreachable: {e}") from e

        if response.get("error"):
            error = response["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise NetworkError(f"{method} failed: {message}")
        if "result" not in response:
            raise NetworkError(f"{method} returned no result")
        return response["result"]

    def get_balance(self, address: str, network: Network) -> int:
        """
        Get the SUI balance of an address in MIST.

        Raises:
            NetworkError: If the node can't be queried or answers garbage
        """
        result = self._call(network, "suix_getBalance", [address, SUI_COIN_TYPE])
        try:
            return int(result["totalBalance"])
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Unexpected balance response: {result!r}") from e


# ============================================
# Utility Functions
# ============================================

def format_balance(mist: int, decimals: int = SUI_DECIMALS, symbol: str = SUI_SYMBOL) -> str:
    """
    Format a raw amount with every decimal place, e.g. "1.500000000 SUI".

    Exact: parse_balance(format_balance(x)) == x for every integer x.
    """
    sign = "-" if mist < 0 else ""
    whole, frac = divmod(abs(mist), 10 ** decimals)
    if decimals == 0:
        return f"{sign}{whole} {symbol}"
    return f"{sign}{whole}.{frac:0{decimals}d} {symbol}"


def format_balance_short(mist: int, places: int = 4, decimals: int = SUI_DECIMALS,
                         symbol: str = SUI_SYMBOL) -> str:
    """Rounded display format, e.g. "1.5000 SUI"."""
    amount = Decimal(mist).scaleb(-decimals)
    return f"{amount:.{places}f} {symbol}"


def parse_balance(text: str, decimals: int = SUI_DECIMALS, symbol: str = SUI_SYMBOL) -> int:
    """
    Parse a formatted balance back to its raw integer amount.

    Raises:
        ValidationError: If the text isn't a number or has too many decimals
    """
    value = text.strip()
    if value.upper().endswith(symbol.upper()):
        value = value[:-len(symbol)].strip()

    negative = value.startswith("-")
    if negative or value.startswith("+"):
        value = value[1:]

    # Integer arithmetic only, exact at any length
    whole, _, frac = value.partition(".")
    if not (whole or frac) or not (whole + frac).isdigit() or not (whole + frac).isascii():
        raise ValidationError(f"Not a balance: {text!r}")
    if len(frac) > decimals:
        if frac[decimals:].strip("0"):
            raise ValidationError(f"Too many decimal places for {symbol}: {text!r}")
        frac = frac[:decimals]

    raw = int(whole or "0") * 10 ** decimals + int(frac.ljust(decimals, "0") or "0")
    return -raw if negative else raw


def format_address(address: str, chars: int = 4) -> str:
    """Format address as 0x1234...5678"""
    if len(address) <= chars * 2 + 2:
        return address
    return f"{address[:chars+2]}...{address[-chars:]}"
