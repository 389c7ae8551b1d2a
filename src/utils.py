"""
Shared utility functions for the Sui wallet.

Contains path helpers used across packages.
"""

import os
import sys
from pathlib import Path


APP_HOME_ENV = "SUI_WALLET_HOME"


def get_app_dir() -> Path:
    """Get the application data directory (holds password.hash and the key blob)."""
    override = os.environ.get(APP_HOME_ENV)
    if override:
        app_dir = Path(override).expanduser()
    elif getattr(sys, 'frozen', False):
        # Running as compiled
        app_dir = Path(sys.executable).parent / "data"
    else:
        # Running as script
        app_dir = Path(__file__).parent.parent / "data"

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_settings_path() -> Path:
    """Get path to settings file."""
    return get_app_dir() / "settings.json"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    logs_dir = get_app_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir
