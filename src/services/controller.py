"""
Wallet Controller - Ties authentication, key storage and balance refresh together.

The UI calls the handle_* methods in response to user actions and poll()
on every timer tick. All WalletState mutation happens on that one thread.

Error policy:
- vault, password and key errors become a status message; the app stays usable
- StateError is a programming error: logged and re-raised
- NetworkError only ever lands in WalletState.last_error
"""

import logging
from typing import Callable, Optional

from models.wallet_state import WalletState
from networks import Network, DEFAULT_NETWORK, format_address
from wallet.auth import AuthContext, AuthPhase
from wallet.errors import CryptoError, StateError, ValidationError, WalletError
from wallet.keys import SuiKeyPair, decode_private_key

from .balance import BalanceClient, BalanceFetcher


logger = logging.getLogger(__name__)


class WalletController:
    """Orchestrates the wallet for a single-threaded control loop."""

    def __init__(self, context: AuthContext, client: BalanceClient,
                 network: Network = DEFAULT_NETWORK):
        self.context = context
        self.fetcher = BalanceFetcher(client)
        self.state = WalletState(network=network)
        self.status = ""
        self.status_is_error = False
        self._keypair: Optional[SuiKeyPair] = None

        # Extra cleanup run inside logout (e.g. UI clearing its input fields)
        self.logout_hooks: list[Callable[[], None]] = []

    # ---- Status ----

    def _report(self, message: str, is_error: bool = False) -> None:
        self.status = message
        self.status_is_error = is_error

    @property
    def auth(self):
        return self.context.auth

    @property
    def phase(self) -> AuthPhase:
        return self.context.auth.phase

    @property
    def keypair(self) -> Optional[SuiKeyPair]:
        return self._keypair

    # ---- Auth ----

    def handle_set_password(self, password: str, confirm: Optional[str] = None) -> bool:
        """First-run password setup. Returns True on success."""
        try:
            self.auth.handle_set_password(password, confirm)
        except StateError:
            logger.error("set_password called outside first-run setup")
            raise
        except WalletError as e:
            self._report(str(e), is_error=True)
            return False
        self._report("Password set. Import a private key to get started.")
        return True

    def handle_verify_password(self, password: str) -> bool:
        """
        Log in, then silently restore the saved key if there is one.

        Returns:
            True if login succeeded (even if restoring the key failed)
        """
        try:
            self.auth.handle_verify_password(password)
        except StateError:
            logger.error("verify_password called in the wrong state")
            raise
        except CryptoError:
            self._report("Incorrect password", is_error=True)
            return False
        except WalletError as e:
            self._report(f"Login failed: {e}", is_error=True)
            return False

        self._report("Logged in")
        self._restore_saved_key()
        return True

    def _restore_saved_key(self) -> None:
        try:
            saved_key = self.context.load_private_key()
        except WalletError as e:
            logger.warning(f"Failed to load saved private key: {e}")
            self._report("Logged in, but the saved key could not be loaded. "
                         "Please import it again.", is_error=True)
            return

        if saved_key is None:
            return  # first run, nothing saved yet

        try:
            keypair = decode_private_key(saved_key)
        except ValidationError as e:
            logger.warning(f"Saved private key is not a valid key: {e}")
            self._report("Saved key is unreadable. Please import it again.", is_error=True)
            return

        self._apply_keypair(keypair)
        self._report(f"Wallet loaded from storage: {format_address(keypair.address)}")
        self.handle_refresh_balance()

    def handle_logout(self) -> None:
        """Clear the session password, then the wallet, then lock."""
        try:
            self.auth.handle_logout(on_logout=self._on_logout)
        except StateError:
            logger.error("logout called while not authenticated")
            raise
        self._report("Logged out")

    def _on_logout(self) -> None:
        try:
            self._clear_wallet_state()
        finally:
            for hook in self.logout_hooks:
                hook()

    def handle_change_password(self, old_password: str, new_password: str,
                               confirm: Optional[str] = None) -> bool:
        if self._expire_session():
            return False
        try:
            self.context.change_password(old_password, new_password, confirm)
        except StateError:
            logger.error("change_password called while not authenticated")
            raise
        except CryptoError:
            self._report("Current password is incorrect", is_error=True)
            return False
        except WalletError as e:
            self._report(f"Password not changed: {e}", is_error=True)
            return False
        self._report("Password changed")
        return True

    def handle_reset_password(self) -> bool:
        """Forget the password and the saved key (from the login screen)."""
        try:
            self.context.reset_password()
        except StateError:
            logger.error("reset_password called while logged in")
            raise
        except WalletError as e:
            self._report(f"Reset failed: {e}", is_error=True)
            return False
        self._report("Password and saved key removed. Set a new password.")
        return True

    # ---- Wallet ----

    def handle_import_key(self, raw_key: str) -> bool:
        """
        Import a private key and, when logged in, save it encrypted.

        A failed save is reported but the import stands.

        Returns:
            True if the key was valid and the wallet is now loaded
        """
        try:
            keypair = decode_private_key(raw_key)
        except ValidationError as e:
            logger.info(f"Private key import rejected: {e}")
            self._report(f"Import failed: {e}", is_error=True)
            return False

        self._apply_keypair(keypair)
        self._report(f"Wallet imported: {format_address(keypair.address)}")

        if self.auth.is_authenticated:
            try:
                self.context.save_private_key(raw_key.strip())
            except WalletError as e:
                logger.error(f"Failed to save encrypted private key: {e}")
                self._report(f"Wallet imported, but saving it failed: {e}", is_error=True)

        self.handle_refresh_balance()
        return True

    def _apply_keypair(self, keypair: SuiKeyPair) -> None:
        self._keypair = keypair
        self.state.load(keypair.address)

    def _clear_wallet_state(self) -> None:
        self._keypair = None
        self.state.reset()

    def clear_wallet(self) -> None:
        """Unload the wallet from memory; the saved key stays on disk."""
        self._clear_wallet_state()
        self._report("Wallet cleared")

    def forget_saved_key(self) -> bool:
        """Delete the encrypted key file."""
        try:
            self.context.vault.delete_encrypted_private_key()
        except WalletError as e:
            self._report(str(e), is_error=True)
            return False
        self._report("Saved key deleted")
        return True

    @property
    def has_saved_key(self) -> bool:
        return self.context.vault.has_encrypted_private_key()

    # ---- Balance ----

    def handle_refresh_balance(self) -> bool:
        """Start a balance refresh. Returns True if a fetch was started or queued."""
        if not self.state.is_loaded:
            self._report("No wallet loaded")
            return False
        return self.fetcher.handle_refresh_balance(self.state)

    def handle_set_network(self, network: Network) -> None:
        """Switch network and refetch for the loaded wallet."""
        if network == self.state.network:
            return
        self.state.set_network(network)
        logger.info(f"Switched to {network.display_name}")
        if self.state.is_loaded:
            self.handle_refresh_balance()

    # ---- Control loop ----

    def poll(self) -> None:
        """
        Per-tick work: expire idle sessions and deliver balance results.

        This is the only place async results reach WalletState.
        """
        self._expire_session()
        self.fetcher.handle_async_results(self.state)

    def _expire_session(self) -> bool:
        """Log out a session past its deadline. Returns True if it did."""
        if not self.auth.is_session_expired():
            return False
        logger.info("Session expired")
        self.handle_logout()
        self._report("Session expired, please log in again")
        return True

    def note_activity(self) -> None:
        """Keep the session alive while the user is interacting."""
        self.auth.extend_session()

    def shutdown(self) -> None:
        """Log out first, then give the balance worker a moment to finish."""
        if self.auth.phase == AuthPhase.AUTHENTICATED:
            self.handle_logout()
        self.fetcher.shutdown()
