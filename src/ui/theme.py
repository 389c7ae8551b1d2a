"""
UI Theme - Colors, fonts and message box helpers.
"""

from PyQt6.QtWidgets import QMessageBox


class Theme:
    """Wallet palette."""

    SUI_BLUE = "#4da2ff"
    SUI_BLUE_DIM = "#2a6cb8"
    NAVY = "#0b1322"           # Background
    NAVY_LIGHT = "#16213a"     # Elevated surfaces
    SLATE = "#5b6b85"          # Secondary text and borders
    WHITE = "#f5f8ff"

    # Status colors
    SUCCESS = "#22c55e"
    ERROR = "#ef4444"
    WARNING = "#f59e0b"

    STRENGTH_COLORS = {
        0: ERROR, 1: ERROR, 2: WARNING, 3: WARNING, 4: SUCCESS, 5: SUCCESS,
    }

    # Typography
    MONO_FONT = "JetBrains Mono"

    MIN_DIALOG_WIDTH = 380
    MIN_POPUP_WIDTH = 300


def ask_question(parent, title: str, message: str, default_no: bool = True) -> bool:
    """
    Show a Yes/No question.
    Returns True if user clicked Yes.
    """
    msg = QMessageBox(parent)
    msg.setWindowTitle(title)
    msg.setText(message)
    msg.setIcon(QMessageBox.Icon.Question)
    msg.setStandardButtons(QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No)
    msg.setDefaultButton(
        QMessageBox.StandardButton.No if default_no else QMessageBox.StandardButton.Yes
    )
    msg.setMinimumWidth(Theme.MIN_POPUP_WIDTH)
    return msg.exec() == QMessageBox.StandardButton.Yes


def show_info(parent, title: str, message: str) -> None:
    msg = QMessageBox(parent)
    msg.setWindowTitle(title)
    msg.setText(message)
    msg.setIcon(QMessageBox.Icon.Information)
    msg.setStandardButtons(QMessageBox.StandardButton.Ok)
    msg.setMinimumWidth(Theme.MIN_POPUP_WIDTH)
    msg.exec()
