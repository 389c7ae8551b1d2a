"""
Panels - The widgets stacked in the main window.

AuthPanel covers first-run setup and login, WalletPanel the loaded wallet,
LogPanel the activity history. Panels call the WalletController directly
and emit `changed` so the window can redraw from controller state.
"""

from datetime import datetime

from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton,
    QComboBox, QPlainTextEdit, QFrame
)
from PyQt6.QtCore import Qt, QUrl, pyqtSignal
from PyQt6.QtGui import QFont, QDesktopServices

from models.wallet_state import WalletState
from networks import Network, format_balance, format_balance_short
from services.controller import WalletController
from services.logging import load_recent_logs
from wallet.auth import password_strength_score, describe_strength

from .theme import Theme, ask_question


class AuthPanel(QWidget):
    """Password setup (first run) or login, depending on the auth phase."""

    changed = pyqtSignal()

    def __init__(self, controller: WalletController):
        super().__init__()
        self.controller = controller

        layout = QVBoxLayout(self)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self.title = QLabel("")
        self.title.setFont(QFont("", 14, QFont.Weight.Bold))
        self.title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.title)

        self.subtitle = QLabel("")
        self.subtitle.setWordWrap(True)
        self.subtitle.setStyleSheet(f"color: {Theme.SLATE};")
        self.subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.subtitle)

        layout.addSpacing(16)

        self.password_input = QLineEdit()
        self.password_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.password_input.setPlaceholderText("Password")
        self.password_input.setMaximumWidth(260)
        self.password_input.textChanged.connect(self._update_strength)
        self.password_input.returnPressed.connect(self.submit)
        layout.addWidget(self.password_input, alignment=Qt.AlignmentFlag.AlignCenter)

        self.confirm_input = QLineEdit()
        self.confirm_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.confirm_input.setPlaceholderText("Confirm password")
        self.confirm_input.setMaximumWidth(260)
        self.confirm_input.returnPressed.connect(self.submit)
        layout.addWidget(self.confirm_input, alignment=Qt.AlignmentFlag.AlignCenter)

        self.strength_label = QLabel("")
        self.strength_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.strength_label)

        self.submit_btn = QPushButton("")
        self.submit_btn.setFixedWidth(120)
        self.submit_btn.clicked.connect(self.submit)
        layout.addWidget(self.submit_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.reset_btn = QPushButton("Forgot password? Reset wallet")
        self.reset_btn.setFlat(True)
        self.reset_btn.setStyleSheet(f"color: {Theme.SLATE};")
        self.reset_btn.clicked.connect(self.reset)
        layout.addWidget(self.reset_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet(f"color: {Theme.ERROR};")
        self.error_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.error_label)

        self.refresh()

    @property
    def is_setup(self) -> bool:
        return self.controller.auth.needs_setup

    def refresh(self):
        """Switch between setup and login layouts."""
        setup = self.is_setup
        self.title.setText("Create Password" if setup else "Wallet Locked")
        self.subtitle.setText(
            "This password encrypts your private key on this computer."
            if setup else "Enter your password to unlock"
        )
        self.submit_btn.setText("Set Password" if setup else "Unlock")
        self.confirm_input.setVisible(setup)
        self.strength_label.setVisible(setup)
        self.reset_btn.setVisible(not setup)
        self._update_strength(self.password_input.text())

    def _update_strength(self, text: str):
        if not self.is_setup or not text:
            self.strength_label.setText("")
            return
        score = password_strength_score(text)
        self.strength_label.setText(f"Strength: {describe_strength(score)}")
        self.strength_label.setStyleSheet(f"color: {Theme.STRENGTH_COLORS[score]};")

    def submit(self):
        password = self.password_input.text()
        if self.is_setup:
            ok = self.controller.handle_set_password(password, self.confirm_input.text())
        else:
            ok = self.controller.handle_verify_password(password)

        if ok:
            self.clear_inputs()
            self.error_label.setText("")
        else:
            self.error_label.setText(self.controller.status)
            self.password_input.clear()
            self.confirm_input.clear()
            self.password_input.setFocus()
        self.changed.emit()

    def reset(self):
        if not ask_question(
            self, "Reset Wallet",
            "This deletes your password and the saved private key.\n\n"
            "You will need the private key to restore the wallet. Continue?"
        ):
            return
        self.controller.handle_reset_password()
        self.clear_inputs()
        self.refresh()
        self.changed.emit()

    def clear_inputs(self):
        self.password_input.clear()
        self.confirm_input.clear()


class WalletPanel(QWidget):
    """Loaded wallet: import, address, network, balance."""

    changed = pyqtSignal()

    def __init__(self, controller: WalletController):
        super().__init__()
        self.controller = controller

        layout = QVBoxLayout(self)

        # Import row
        import_row = QHBoxLayout()
        self.key_input = QLineEdit()
        self.key_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.key_input.setPlaceholderText("suiprivkey1..., Base64 or hex private key")
        self.key_input.returnPressed.connect(self.import_key)
        import_row.addWidget(self.key_input)

        import_btn = QPushButton("Import")
        import_btn.clicked.connect(self.import_key)
        import_row.addWidget(import_btn)
        layout.addLayout(import_row)

        # Network selector
        toolbar = QHBoxLayout()
        self.network_combo = QComboBox()
        self.network_combo.setFixedWidth(140)
        for network in Network:
            self.network_combo.addItem(network.display_name, network)
        self.network_combo.currentIndexChanged.connect(self._on_network_changed)
        toolbar.addWidget(self.network_combo)
        toolbar.addStretch()

        self.refresh_btn = QPushButton("Refresh")
        self.refresh_btn.clicked.connect(self.refresh_balance)
        toolbar.addWidget(self.refresh_btn)

        self.explorer_btn = QPushButton("Explorer")
        self.explorer_btn.clicked.connect(self.open_explorer)
        toolbar.addWidget(self.explorer_btn)

        self.clear_btn = QPushButton("Clear")
        self.clear_btn.setToolTip("Unload the wallet; the saved key stays on disk")
        self.clear_btn.clicked.connect(self.clear_wallet)
        toolbar.addWidget(self.clear_btn)

        self.forget_btn = QPushButton("Forget Saved Key")
        self.forget_btn.clicked.connect(self.forget_saved_key)
        toolbar.addWidget(self.forget_btn)
        layout.addLayout(toolbar)

        card = QFrame()
        card.setStyleSheet(f"background-color: {Theme.NAVY_LIGHT}; border-radius: 6px;")
        card_layout = QVBoxLayout(card)

        self.address_label = QLabel("No wallet loaded")
        self.address_label.setFont(QFont(Theme.MONO_FONT, 10))
        self.address_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
        card_layout.addWidget(self.address_label)

        self.balance_label = QLabel("")
        self.balance_label.setFont(QFont(Theme.MONO_FONT, 18, QFont.Weight.Bold))
        self.balance_label.setStyleSheet(f"color: {Theme.SUI_BLUE};")
        card_layout.addWidget(self.balance_label)

        self.balance_error = QLabel("")
        self.balance_error.setWordWrap(True)
        self.balance_error.setStyleSheet(f"color: {Theme.WARNING};")
        card_layout.addWidget(self.balance_error)

        layout.addWidget(card)
        layout.addStretch()

        self.refresh()

    @property
    def state(self) -> WalletState:
        return self.controller.state

    def refresh(self):
        """Redraw from WalletState."""
        state = self.state

        index = self.network_combo.findData(state.network)
        if index >= 0 and index != self.network_combo.currentIndex():
            self.network_combo.blockSignals(True)
            self.network_combo.setCurrentIndex(index)
            self.network_combo.blockSignals(False)

        loaded = state.is_loaded
        self.refresh_btn.setEnabled(loaded and not state.loading)
        self.explorer_btn.setEnabled(loaded)
        self.clear_btn.setEnabled(loaded)
        self.forget_btn.setEnabled(self.controller.has_saved_key)

        if not loaded:
            self.address_label.setText("No wallet loaded")
            self.balance_label.setText("")
            self.balance_error.setText("")
            return

        self.address_label.setText(state.address)
        if state.balance is None:
            self.balance_label.setText("Loading..." if state.loading else "-")
            self.balance_label.setToolTip("")
        else:
            self.balance_label.setText(format_balance_short(state.balance))
            self.balance_label.setToolTip(format_balance(state.balance))
        self.balance_error.setText(f"Refresh failed: {state.last_error}" if state.last_error else "")

    def import_key(self):
        raw_key = self.key_input.text()
        if self.controller.handle_import_key(raw_key):
            self.key_input.clear()
        self.changed.emit()

    def refresh_balance(self):
        self.controller.handle_refresh_balance()
        self.changed.emit()

    def _on_network_changed(self, index: int):
        network = self.network_combo.itemData(index)
        if network is not None:
            self.controller.handle_set_network(network)
            self.changed.emit()

    def open_explorer(self):
        if self.state.address:
            QDesktopServices.openUrl(QUrl(self.state.network.address_explorer_url(self.state.address)))

    def clear_wallet(self):
        self.controller.clear_wallet()
        self.changed.emit()

    def forget_saved_key(self):
        if ask_question(self, "Forget Saved Key",
                        "Delete the encrypted private key from this computer?"):
            self.controller.forget_saved_key()
            self.changed.emit()

    def clear_inputs(self):
        self.key_input.clear()


class LogPanel(QWidget):
    """Scrolling activity history."""

    MAX_LINES = 1000

    def __init__(self):
        super().__init__()
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.text = QPlainTextEdit()
        self.text.setReadOnly(True)
        self.text.setFont(QFont(Theme.MONO_FONT, 9))
        self.text.setMaximumBlockCount(self.MAX_LINES)
        layout.addWidget(self.text)

    def add_log(self, message: str):
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.text.appendPlainText(f"[{timestamp}] {message}")

    def load_recent(self, max_lines: int):
        """Show the tail of the on-disk log."""
        for line in load_recent_logs(max_lines):
            self.text.appendPlainText(line)
