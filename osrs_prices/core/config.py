"""
Configuration management for the OSRS prices client.
Handles the client identity, endpoint, timeout and default region.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from osrs_prices.core.constants import (
    API_TIMEOUT_DEFAULT,
    DEFAULT_USER_AGENT,
    PRICES_ENDPOINT,
)
from osrs_prices.core.game_mode import Region

logger = logging.getLogger(__name__)

# Environment variables that override the file (never persisted)
ENV_USER_AGENT = "OSRS_PRICES_USER_AGENT"
ENV_BASE_URL = "OSRS_PRICES_BASE_URL"
ENV_TIMEOUT = "OSRS_PRICES_TIMEOUT"


def get_config_dir() -> Path:
    """
    Get the application config directory.

    Returns:
        Path to the config directory (~/.osrs_prices/)
    """
    return Path.home() / ".osrs_prices"


class Config:
    """
    Client configuration with JSON persistence.

    Lookup order for every setting: environment variable, then the JSON
    file, then DEFAULT_CONFIG.
    """

    # NOTE: This structure is treated as immutable. Always use
    # _default_config_deepcopy() when you need a fresh copy of defaults.
    DEFAULT_CONFIG: Dict[str, Any] = {
        "user_agent": DEFAULT_USER_AGENT,
        "base_url": PRICES_ENDPOINT,
        "timeout": API_TIMEOUT_DEFAULT,
        "region": Region.REGULAR.value,
    }

    def __init__(self, config_file: Optional[Path] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Optional path to config JSON file. When omitted,
                         ~/.osrs_prices/config.json is used.
        """
        self.config_file: Path = self._resolve_config_path(config_file)

        # Load data from disk (or defaults)
        self.data: Dict[str, Any] = self._load()
        logger.debug(f"Config loaded from {self.config_file}")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve_config_path(config_file: Optional[Path]) -> Path:
        if config_file is not None:
            return Path(config_file)
        return get_config_dir() / "config.json"

    def _load(self) -> Dict[str, Any]:
        """Load configuration from JSON file, merging with defaults."""
        if not self.config_file.exists():
            logger.debug("No config file found, using defaults")
            return self._default_config_deepcopy()

        try:
            with self.config_file.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to load config: {exc}. Using defaults.")
            return self._default_config_deepcopy()

        if not isinstance(raw, dict):
            logger.warning("Config file is not a JSON object. Using defaults.")
            return self._default_config_deepcopy()

        merged = self._default_config_deepcopy()
        merged.update(raw)
        return merged

    @classmethod
    def _default_config_deepcopy(cls) -> Dict[str, Any]:
        """Fresh copy of DEFAULT_CONFIG, so instances never share state."""
        return copy.deepcopy(cls.DEFAULT_CONFIG)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> None:
        """Persist the current configuration to the config file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with self.config_file.open("w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
            logger.info("Configuration saved")
        except OSError as exc:
            logger.error(f"Failed to save config: {exc}")

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def user_agent(self) -> str:
        env = os.environ.get(ENV_USER_AGENT, "").strip()
        if env:
            return env
        value = self.data.get("user_agent")
        if isinstance(value, str) and value.strip():
            return value
        return DEFAULT_USER_AGENT

    @user_agent.setter
    def user_agent(self, value: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("user_agent must be a non-empty string")
        self.data["user_agent"] = value.strip()
        self.save()

    @property
    def base_url(self) -> str:
        env = os.environ.get(ENV_BASE_URL, "").strip()
        if env:
            return env
        return self.data.get("base_url") or PRICES_ENDPOINT

    @base_url.setter
    def base_url(self, value: str) -> None:
        self.data["base_url"] = value
        self.save()

    @property
    def timeout(self) -> float:
        """Request timeout in seconds. Invalid values fall back to the default."""
        raw: Any = os.environ.get(ENV_TIMEOUT) or self.data.get("timeout")
        try:
            value = float(raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid timeout {raw!r}, using {API_TIMEOUT_DEFAULT}s")
            return float(API_TIMEOUT_DEFAULT)
        if value <= 0:
            logger.warning(f"Non-positive timeout {raw!r}, using {API_TIMEOUT_DEFAULT}s")
            return float(API_TIMEOUT_DEFAULT)
        return value

    @timeout.setter
    def timeout(self, value: float) -> None:
        if float(value) <= 0:
            raise ValueError(f"timeout must be positive, got {value}")
        self.data["timeout"] = float(value)
        self.save()

    @property
    def region(self) -> Region:
        """Default region for the CLI."""
        return Region.from_string(self.data.get("region", "")) or Region.get_default()

    @region.setter
    def region(self, value: Union[Region, str]) -> None:
        region = value if isinstance(value, Region) else Region.from_string(value)
        if region is None:
            raise ValueError(f"unknown region: {value!r}")
        self.data["region"] = region.value
        self.save()
