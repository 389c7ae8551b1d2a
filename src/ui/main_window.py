"""
Main Window - The primary application window.

Contains the header, the auth / wallet views, the log view and the status
bar. A QTimer drives WalletController.poll(), which is where session expiry
and finished balance fetches are handled.
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFrame,
    QStackedWidget, QTabWidget, QStatusBar, QApplication
)
from PyQt6.QtCore import Qt, QTimer, QEvent
from PyQt6.QtGui import QFont

from models.settings import Settings
from networks import SuiNodeClient, format_address
from services.controller import WalletController
from wallet.auth import AuthPhase

from .theme import Theme, show_info
from .panels import AuthPanel, WalletPanel, LogPanel
from .dialogs import ChangePasswordDialog, SettingsDialog


logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 250


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, controller: WalletController, settings: Settings,
                 settings_path: Path, node_client: SuiNodeClient):
        super().__init__()
        self.controller = controller
        self.settings = settings
        self.settings_path = settings_path
        self.node_client = node_client

        self._last_status = ""
        self._last_phase = None

        self.setWindowTitle("Sui Wallet")
        self.setMinimumSize(640, 420)

        self.create_menu_bar()

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)

        layout.addWidget(self.create_header())

        self.status = QStatusBar()
        self.setStatusBar(self.status)

        self.auth_panel = AuthPanel(controller)
        self.auth_panel.changed.connect(self.refresh_view)
        self.wallet_panel = WalletPanel(controller)
        self.wallet_panel.changed.connect(self.refresh_view)
        self.log_panel = LogPanel()

        self.tabs = QTabWidget()
        self.tabs.addTab(self.wallet_panel, "Wallet")
        self.tabs.addTab(self.log_panel, "Logs")

        self.stack = QStackedWidget()
        self.stack.addWidget(self.auth_panel)
        self.stack.addWidget(self.tabs)
        layout.addWidget(self.stack)

        if settings.log_lines_on_startup > 0:
            self.log_panel.load_recent(settings.log_lines_on_startup)

        # Input fields must not survive a logout
        controller.logout_hooks.append(self.auth_panel.clear_inputs)
        controller.logout_hooks.append(self.wallet_panel.clear_inputs)

        # Any key or click counts as activity for the session timeout
        QApplication.instance().installEventFilter(self)

        self.timer = QTimer(self)
        self.timer.timeout.connect(self.on_tick)
        self.timer.start(TICK_INTERVAL_MS)

        self.refresh_view()

    # ---- Control loop ----

    def on_tick(self):
        self.controller.poll()
        self.refresh_view()

    def eventFilter(self, obj, event):
        if event.type() in (QEvent.Type.KeyPress, QEvent.Type.MouseButtonPress):
            if self.controller.phase == AuthPhase.AUTHENTICATED:
                self.controller.note_activity()
        return super().eventFilter(obj, event)

    def refresh_view(self):
        """Redraw everything from controller state."""
        phase = self.controller.phase
        authenticated = phase == AuthPhase.AUTHENTICATED

        if phase != self._last_phase:
            self._last_phase = phase
            self.stack.setCurrentWidget(self.tabs if authenticated else self.auth_panel)
            self.auth_panel.refresh()
            self.change_password_action.setEnabled(authenticated)
            self.logout_action.setEnabled(authenticated)

        self.wallet_panel.refresh()
        self.update_indicators()

        if self.controller.state.network != self.settings.network:
            self.settings.network = self.controller.state.network
            self.settings.save(self.settings_path)

        if self.controller.status != self._last_status:
            self._last_status = self.controller.status
            if self._last_status:
                self.update_activity(self._last_status, self.controller.status_is_error)

    def update_indicators(self):
        state = self.controller.state
        if self.controller.phase == AuthPhase.AUTHENTICATED:
            self.auth_indicator.setStyleSheet(f"color: {Theme.SUCCESS}; font-size: 12px;")
            self.auth_label.setText("Unlocked")
        else:
            self.auth_indicator.setStyleSheet(f"color: {Theme.ERROR}; font-size: 12px;")
            self.auth_label.setText("Locked")

        wallet_text = format_address(state.address) if state.address else "No wallet"
        self.wallet_label.setText(f"{wallet_text} | {state.network.display_name}")

    def update_activity(self, message: str, is_error: bool = False):
        """Show a message in the status bar and the log view."""
        color = Theme.ERROR if is_error else Theme.WHITE
        self.status.setStyleSheet(f"color: {color};")
        self.status.showMessage(message)
        self.log_panel.add_log(message)
        if is_error:
            logger.warning(message)
        else:
            logger.info(message)

    # ---- Layout ----

    def create_header(self) -> QFrame:
        header = QFrame()
        header.setStyleSheet(f"background-color: {Theme.NAVY};")
        header.setFixedHeight(56)

        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(16, 8, 16, 8)

        title = QLabel("SUI WALLET")
        title.setStyleSheet(f"color: {Theme.SUI_BLUE}; font-weight: bold; font-size: 16px;")
        header_layout.addWidget(title)
        header_layout.addStretch()

        self.wallet_label = QLabel("")
        self.wallet_label.setFont(QFont(Theme.MONO_FONT, 9))
        self.wallet_label.setStyleSheet(f"color: {Theme.WHITE};")
        header_layout.addWidget(self.wallet_label)
        header_layout.addSpacing(16)

        self.auth_indicator = QLabel("●")
        self.auth_indicator.setFixedWidth(12)
        header_layout.addWidget(self.auth_indicator)
        self.auth_label = QLabel("")
        self.auth_label.setFont(QFont(Theme.MONO_FONT, 9))
        self.auth_label.setStyleSheet(f"color: {Theme.WHITE};")
        header_layout.addWidget(self.auth_label, alignment=Qt.AlignmentFlag.AlignVCenter)

        return header

    def create_menu_bar(self):
        menubar = self.menuBar()

        file_menu = menubar.addMenu("File")
        self.change_password_action = file_menu.addAction("Change Password...", self.change_password)
        self.logout_action = file_menu.addAction("Log Out", self.logout)
        file_menu.addSeparator()
        file_menu.addAction("Quit", self.close)

        settings_menu = menubar.addMenu("Settings")
        settings_menu.addAction("Preferences...", self.show_settings)

        help_menu = menubar.addMenu("Help")
        help_menu.addAction("About", self.show_about)

    # ---- Actions ----

    def logout(self):
        if self.controller.phase == AuthPhase.AUTHENTICATED:
            self.controller.handle_logout()
        self.refresh_view()

    def change_password(self):
        ChangePasswordDialog(self.controller, self).exec()
        self.refresh_view()

    def show_settings(self):
        dialog = SettingsDialog(self.settings, self)
        if not dialog.exec():
            return
        self.settings = dialog.get_settings()
        self.settings.save(self.settings_path)
        self.node_client.set_custom_rpcs(self.settings.custom_rpcs)
        self.update_activity("Preferences saved")

    def show_about(self):
        show_info(
            self, "About",
            "Sui Wallet\n\n"
            "Keeps one Sui private key encrypted on this computer "
            "and shows its SUI balance."
        )

    def closeEvent(self, event):
        self.timer.stop()
        self.controller.shutdown()
        super().closeEvent(event)
