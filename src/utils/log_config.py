"""Logbook configuration - YAML settings and diagnostic logging setup."""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import yaml
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


@dataclass
class LogbookConfig:
    """Settings for the logbook command line."""

    # Where sessions without an explicit path are created
    log_dir: str = "logs"

    # Console echo default for begin/entry/end
    echo: bool = False

    # Level for diagnostic (not session) logging
    logging_level: str = "INFO"

    @property
    def log_path(self) -> Path:
        return Path(self.log_dir)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogbookConfig":
        """Create from the nested layout of config.yaml."""
        logbook = data.get("logbook") or {}
        logging_section = data.get("logging") or {}

        return cls(
            log_dir=str(logbook.get("log_dir", "logs")),
            echo=bool(logbook.get("echo", False)),
            logging_level=str(logging_section.get("level", "INFO")).upper(),
        )


class ConfigLoader:
    """Load logbook configuration from config.yaml."""

    def __init__(self, config_path: str = "config/config.yaml"):
        self.config_path = Path(config_path)

    def load_base_config(self) -> Dict[str, Any]:
        """Load raw configuration from config.yaml."""
        try:
            with open(self.config_path, 'r') as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning(f"Config file not found: {self.config_path}")
            return {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            return {}

    def get_config(self) -> LogbookConfig:
        """Get logbook configuration, falling back to defaults."""
        data = self.load_base_config()
        if not isinstance(data, dict):
            logger.error(f"Config file {self.config_path} must contain a mapping, using defaults")
            return LogbookConfig()
        return LogbookConfig.from_dict(data)


def configure_logging(level: Optional[str] = None) -> None:
    """Set up diagnostic logging the same way for every entry point."""
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format=LOG_FORMAT,
    )
