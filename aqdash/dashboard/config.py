"""Configuration for the dashboard service."""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from aqdash.shared.config import get_config_path, load_yaml_config
from aqdash.telemetry.config import ThingSpeakConfig

logger = logging.getLogger(__name__)


@dataclass
class DashboardConfig:
    """Configuration for the dashboard."""

    thingspeak: ThingSpeakConfig = field(default_factory=ThingSpeakConfig)

    # Live polling period; ThingSpeak itself accepts an update every 15s
    update_interval_ms: int = 15000

    # Length of the default historical and comparison ranges
    history_hours: float = 24.0

    # Terminal redraw period (seconds)
    refresh_interval: float = 1.0

    log_level: str = "INFO"

    @property
    def update_interval(self) -> float:
        """Polling period in seconds."""
        return self.update_interval_ms / 1000.0

    @classmethod
    def from_dict(cls, data: dict) -> "DashboardConfig":
        """Create config from dictionary."""
        return cls(
            thingspeak=ThingSpeakConfig.from_dict(data.get("thingspeak", {})),
            update_interval_ms=int(data.get("update_interval_ms", 15000)),
            history_hours=float(data.get("history_hours", 24.0)),
            refresh_interval=float(data.get("refresh_interval", 1.0)),
            log_level=data.get("log_level", "INFO"),
        )


def load_config(config_path: Optional[str] = None) -> DashboardConfig:
    """Load configuration from YAML file and environment.

    Args:
        config_path: Path to YAML config file. If not provided,
                    looks for AQDASH_CONFIG env var, then the repo's
                    config directory, then falls back to defaults.

    Returns:
        DashboardConfig instance.

    Raises:
        FileNotFoundError: If an explicitly named config file is missing.
        ValueError: If the field mapping is invalid.
    """
    load_dotenv()

    if config_path is None:
        config_path = os.environ.get("AQDASH_CONFIG")

    if config_path:
        config = DashboardConfig.from_dict(load_yaml_config(config_path, load_env=False))
    else:
        default_path = get_config_path()
        if default_path.exists():
            config = DashboardConfig.from_dict(load_yaml_config(default_path, load_env=False))
        else:
            logger.debug(f"No config file at {default_path}, using defaults")
            config = DashboardConfig()

    # Environment variable overrides (credentials usually live in .env)
    if channel_id := os.environ.get("THINGSPEAK_CHANNEL_ID"):
        config.thingspeak.channel_id = channel_id
    if api_key := os.environ.get("THINGSPEAK_READ_API_KEY"):
        config.thingspeak.read_api_key = api_key
    if interval := os.environ.get("AQDASH_UPDATE_INTERVAL_MS"):
        config.update_interval_ms = int(interval)
    if log_level := os.environ.get("LOG_LEVEL"):
        config.log_level = log_level

    return config
