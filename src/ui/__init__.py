"""
UI package - PyQt6 user interface components.

Contains:
- Theme: Colors, fonts and message box helpers
- MainWindow: Main application window, drives the control-loop tick
- Panels: Auth (setup / login), Wallet, Logs
- Dialogs: Change password, preferences
"""

from .theme import Theme, ask_question, show_info
from .main_window import MainWindow
from .panels import AuthPanel, WalletPanel, LogPanel
from .dialogs import ChangePasswordDialog, SettingsDialog

__all__ = [
    "Theme",
    "ask_question",
    "show_info",
    "MainWindow",
    "AuthPanel",
    "WalletPanel",
    "LogPanel",
    "ChangePasswordDialog",
    "SettingsDialog",
]
