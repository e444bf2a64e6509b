"""
IOBeat - Configuration

Loads the YAML configuration file and validates the collector settings.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml

from .diskstats import DEFAULT_SOURCE
from .exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

DEFAULT_PERIOD = 10  # seconds
DEFAULT_CONFIG_PATH = "config.yaml"


@dataclass(frozen=True)
class CollectorConfig:
    """Immutable per-run collector settings."""
    period: float = DEFAULT_PERIOD
    source: str = DEFAULT_SOURCE

    def __post_init__(self):
        if isinstance(self.period, bool) or not isinstance(self.period, (int, float)):
            raise ConfigurationError(f"period must be a number, got {self.period!r}")
        if self.period <= 0:
            raise ConfigurationError(f"period must be positive, got {self.period}")
        if not self.source:
            raise ConfigurationError("source path must not be empty")

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]]) -> "CollectorConfig":
        """
        Build from the `iobeat` section of the raw configuration.

        An unset or non-positive period falls back to the default. A period
        that is not an integer is rejected.
        """
        section = section or {}
        if not isinstance(section, dict):
            raise ConfigurationError("iobeat section must be a mapping")

        period = section.get("period")
        if period is None:
            period = DEFAULT_PERIOD
        elif isinstance(period, bool) or not isinstance(period, int):
            raise ConfigurationError(f"period must be an integer number of seconds, got {period!r}")
        elif period <= 0:
            logger.warning("Non-positive period, using default", period=period, default=DEFAULT_PERIOD)
            period = DEFAULT_PERIOD

        source = section.get("source") or DEFAULT_SOURCE
        if not isinstance(source, str):
            raise ConfigurationError(f"source must be a path, got {source!r}")

        return cls(period=period, source=source)


def default_config() -> Dict[str, Any]:
    """Return default configuration."""
    return {
        "iobeat": {"period": DEFAULT_PERIOD, "source": DEFAULT_SOURCE},
        "output": {"type": "console"},
        "logging": {"level": "INFO"},
    }


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file not found, using defaults", path=config_path)
        return default_config()

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping")

    logger.info("Configuration loaded", path=config_path)
    return config
