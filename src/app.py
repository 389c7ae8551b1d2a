"""
Sui Wallet - Local credential vault and balance viewer.

Entry point for the application.
"""

import sys

from PyQt6.QtWidgets import QApplication

from models.settings import Settings
from networks import SuiNodeClient
from services.controller import WalletController
from services.logging import configure_logging
from ui import MainWindow
from utils import get_app_dir, get_settings_path
from wallet.auth import AuthContext


def main():
    """Application entry point."""
    settings_path = get_settings_path()
    settings = Settings.load(settings_path)

    # Configure logging before anything else
    configure_logging(retention_days=settings.log_retention_days)

    app = QApplication(sys.argv)
    app.setApplicationName("Sui Wallet")
    app.setOrganizationName("Sui Wallet")

    context = AuthContext(
        get_app_dir(),
        session_timeout_minutes=settings.session_timeout_minutes,
        enforce_strength=settings.enforce_password_strength,
    )
    node_client = SuiNodeClient(settings.custom_rpcs)
    controller = WalletController(context, node_client, settings.network)

    window = MainWindow(controller, settings, settings_path, node_client)
    window.show()

    if context.auth.needs_setup:
        window.update_activity("Welcome. Set a password to get started")

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
