# SPDX-FileCopyrightText: 2024 Pepijn de Vos
#
# SPDX-License-Identifier: MPL-2.0
"""Configuration management for the file field adapter.

Values are looked up in this order:
- ~/.config/filefield/settings.json
- FILEFIELD_SDK_NAME, FILEFIELD_POLL_ATTEMPTS, FILEFIELD_POLL_INTERVAL_MS
- built-in defaults
"""

import os
import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any

logger = logging.getLogger("filefield.config")

DEFAULT_SDK_NAME = "ApperSDK"
DEFAULT_POLL_ATTEMPTS = 50
DEFAULT_POLL_INTERVAL_MS = 100


class FieldBridgeConfig:
    """Settings for SDK discovery and readiness polling."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration from file or environment."""
        self.config_path = config_path or Path.home() / ".config" / "filefield" / "settings.json"
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file if it exists."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    return json.load(f)
            except (OSError, ValueError) as e:
                # Fall back to env vars
                logger.warning(f"Failed to load config file {self.config_path}: {e}")
                return {}
        return {}

    def _get_int(self, key: str, env: str, default: int) -> int:
        raw = self.config.get("poll", {}).get(key)
        if raw is None:
            raw = os.getenv(env)
        if raw is None or raw == "":
            return default
        try:
            value = int(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-integer {key}={raw!r}, using {default}")
            return default
        if value < 1:
            logger.warning(f"Ignoring non-positive {key}={value}, using {default}")
            return default
        return value

    def get_sdk_name(self) -> str:
        """Get the registry name the SDK publishes itself under."""
        return (
            self.config.get("sdk_name") or
            os.getenv("FILEFIELD_SDK_NAME") or
            DEFAULT_SDK_NAME
        )

    def get_poll_attempts(self) -> int:
        """Get the number of registry checks before giving up."""
        return self._get_int("attempts", "FILEFIELD_POLL_ATTEMPTS", DEFAULT_POLL_ATTEMPTS)

    def get_poll_interval(self) -> float:
        """Get the wait between registry checks, in seconds."""
        return self._get_int("interval_ms", "FILEFIELD_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS) / 1000

    def save_config_template(self):
        """Save a configuration template file if it doesn't exist."""
        if not self.config_path.exists():
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            template = {
                "sdk_name": DEFAULT_SDK_NAME,
                "poll": {
                    "attempts": DEFAULT_POLL_ATTEMPTS,
                    "interval_ms": DEFAULT_POLL_INTERVAL_MS
                }
            }
            with open(self.config_path, 'w') as f:
                json.dump(template, f, indent=2)
            logger.info(f"Created config template at: {self.config_path}")


# Global config instance
_config: Optional[FieldBridgeConfig] = None


def get_config() -> FieldBridgeConfig:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = FieldBridgeConfig()
    return _config


def reset_config():
    """Drop the global config so the next get_config() re-reads it."""
    global _config
    _config = None
