"""
Settings model.

Application settings persisted as JSON in settings.json.
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from pathlib import Path

from networks import Network, DEFAULT_NETWORK
from wallet.crypto import atomic_write_text
from wallet.auth import DEFAULT_SESSION_TIMEOUT_MINUTES


logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """User-adjustable application settings."""
    network: Network = DEFAULT_NETWORK
    custom_rpcs: dict[Network, str] = field(default_factory=dict)
    session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES  # 0 = never expire
    enforce_password_strength: bool = False
    log_retention_days: int = 0       # 0 = don't write log files
    log_lines_on_startup: int = 0     # recent log lines shown in the activity view

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON storage."""
        data = asdict(self)
        data["network"] = self.network.value
        # JSON keys must be strings
        data["custom_rpcs"] = {n.value: url for n, url in self.custom_rpcs.items()}
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Create from dictionary, ignoring unknown or invalid values."""
        settings = cls()

        network = Network.parse(str(data.get("network", "")))
        if network is not None:
            settings.network = network

        rpcs = data.get("custom_rpcs", {})
        if isinstance(rpcs, dict):
            for name, url in rpcs.items():
                parsed = Network.parse(str(name))
                if parsed is not None and isinstance(url, str) and url.strip():
                    settings.custom_rpcs[parsed] = url.strip()

        for key in ("session_timeout_minutes", "log_retention_days", "log_lines_on_startup"):
            value = data.get(key)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                setattr(settings, key, value)

        if isinstance(data.get("enforce_password_strength"), bool):
            settings.enforce_password_strength = data["enforce_password_strength"]

        return settings

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load settings from disk, falling back to defaults."""
        if path.exists():
            try:
                with open(path, 'r') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return cls.from_dict(data)
                logger.warning("Settings file is not a JSON object, using defaults")
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load settings: {e}")
        return cls()

    def save(self, path: Path) -> None:
        """Save settings to disk."""
        try:
            atomic_write_text(path, json.dumps(self.to_dict(), indent=2))
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
