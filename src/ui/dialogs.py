"""
Dialogs - Change password and preferences.
"""

from dataclasses import replace

from PyQt6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QGroupBox, QLabel,
    QLineEdit, QPushButton, QCheckBox, QSpinBox
)

from models.settings import Settings
from networks import Network
from services.controller import WalletController

from .theme import Theme


class ChangePasswordDialog(QDialog):
    """Re-encrypts the saved key under a new password."""

    BUTTON_WIDTH = 100

    def __init__(self, controller: WalletController, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Change Password")
        self.setModal(True)
        self.setMinimumWidth(Theme.MIN_DIALOG_WIDTH)
        self.controller = controller

        layout = QVBoxLayout(self)
        layout.setSpacing(12)

        self.old_input = self._password_field("Current password")
        layout.addWidget(self.old_input)
        self.new_input = self._password_field("New password")
        layout.addWidget(self.new_input)
        self.confirm_input = self._password_field("Confirm new password")
        layout.addWidget(self.confirm_input)

        self.error_label = QLabel("")
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(f"color: {Theme.ERROR};")
        layout.addWidget(self.error_label)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()

        cancel_btn = QPushButton("Cancel")
        cancel_btn.setFixedWidth(self.BUTTON_WIDTH)
        cancel_btn.clicked.connect(self.reject)
        btn_layout.addWidget(cancel_btn)

        ok_btn = QPushButton("Change")
        ok_btn.setFixedWidth(self.BUTTON_WIDTH)
        ok_btn.setDefault(True)
        ok_btn.clicked.connect(self.on_change)
        btn_layout.addWidget(ok_btn)

        layout.addLayout(btn_layout)

    def _password_field(self, placeholder: str) -> QLineEdit:
        field = QLineEdit()
        field.setEchoMode(QLineEdit.EchoMode.Password)
        field.setPlaceholderText(placeholder)
        field.returnPressed.connect(self.on_change)
        return field

    def on_change(self):
        ok = self.controller.handle_change_password(
            self.old_input.text(), self.new_input.text(), self.confirm_input.text()
        )
        if ok:
            self.accept()
            return
        self.error_label.setText(self.controller.status)
        self.old_input.clear()
        self.old_input.setFocus()


class SettingsDialog(QDialog):
    """Preferences. get_settings() returns the edited copy."""

    def __init__(self, settings: Settings, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Preferences")
        self.setMinimumWidth(450)
        self._settings = settings

        layout = QVBoxLayout(self)

        # Security group
        security_group = QGroupBox("Security")
        security_layout = QFormLayout(security_group)

        self.timeout_spin = QSpinBox()
        self.timeout_spin.setRange(0, 24 * 60)
        self.timeout_spin.setSuffix(" min")
        self.timeout_spin.setSpecialValueText("Never")
        self.timeout_spin.setValue(settings.session_timeout_minutes)
        security_layout.addRow("Log out after inactivity:", self.timeout_spin)

        self.strength_checkbox = QCheckBox("Require strong passwords")
        self.strength_checkbox.setChecked(settings.enforce_password_strength)
        security_layout.addRow(self.strength_checkbox)

        note = QLabel("Security changes apply after restart.")
        note.setStyleSheet(f"color: {Theme.SLATE};")
        security_layout.addRow(note)
        layout.addWidget(security_group)

        # RPC group
        rpc_group = QGroupBox("RPC Endpoints")
        rpc_layout = QFormLayout(rpc_group)
        self.rpc_inputs: dict[Network, QLineEdit] = {}
        for network in Network:
            field = QLineEdit(settings.custom_rpcs.get(network, ""))
            field.setPlaceholderText(network.rpc_url)
            self.rpc_inputs[network] = field
            rpc_layout.addRow(f"{network.display_name}:", field)
        layout.addWidget(rpc_group)

        # Logging group
        logging_group = QGroupBox("Logging")
        logging_layout = QFormLayout(logging_group)

        self.retention_spin = QSpinBox()
        self.retention_spin.setRange(0, 365)
        self.retention_spin.setSuffix(" days")
        self.retention_spin.setSpecialValueText("Don't save logs")
        self.retention_spin.setValue(settings.log_retention_days)
        logging_layout.addRow("Keep log files for:", self.retention_spin)

        self.lines_spin = QSpinBox()
        self.lines_spin.setRange(0, 5000)
        self.lines_spin.setSingleStep(100)
        self.lines_spin.setSpecialValueText("None")
        self.lines_spin.setValue(settings.log_lines_on_startup)
        logging_layout.addRow("Lines shown on startup:", self.lines_spin)
        layout.addWidget(logging_group)

        btn_layout = QHBoxLayout()
        btn_layout.addStretch()
        cancel_btn = QPushButton("Cancel")
        cancel_btn.clicked.connect(self.reject)
        btn_layout.addWidget(cancel_btn)
        save_btn = QPushButton("Save")
        save_btn.setDefault(True)
        save_btn.clicked.connect(self.accept)
        btn_layout.addWidget(save_btn)
        layout.addLayout(btn_layout)

    def get_settings(self) -> Settings:
        custom_rpcs = {
            network: field.text().strip()
            for network, field in self.rpc_inputs.items()
            if field.text().strip()
        }
        return replace(
            self._settings,
            custom_rpcs=custom_rpcs,
            session_timeout_minutes=self.timeout_spin.value(),
            enforce_password_strength=self.strength_checkbox.isChecked(),
            log_retention_days=self.retention_spin.value(),
            log_lines_on_startup=self.lines_spin.value(),
        )
