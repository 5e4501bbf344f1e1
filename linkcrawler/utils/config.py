"""
Configuration management for the link crawler.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


UNBOUNDED_DEPTH_VALUES = (None, -1, 'unbounded')


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    seed_url: Optional[str] = None
    task_count: int = 1
    max_depth: Optional[int] = None
    request_timeout: int = 30
    user_agent: str = "LinkCrawler/1.0"
    max_content_size: int = 10 * 1024 * 1024


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = "logs/crawler.log"
    format: str = "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s"
    console_level: str = "WARNING"
    json: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'file': self.file,
            'format': self.format,
            'console_level': self.console_level
        }


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def default(cls) -> 'Config':
        """Configuration used when no file is given."""
        return cls()


def parse_depth(value: Any) -> Optional[int]:
    """
    Convert a configured depth bound into the engine's representation.

    None, -1 and "unbounded" mean no limit. Any other value must be a
    non-negative integer.
    """
    if isinstance(value, str):
        if value.strip().lower() == 'unbounded':
            return None
        try:
            value = int(value)
        except ValueError:
            raise ValueError(f"max_depth must be an integer or 'unbounded', got {value!r}")

    if value in UNBOUNDED_DEPTH_VALUES:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"max_depth must be an integer or 'unbounded', got {value!r}")
    if value < 0:
        raise ValueError("max_depth must be non-negative (or -1 for unbounded)")
    return value


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: str = "config.yaml"):
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r') as file:
            config_data = yaml.safe_load(file) or {}

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {self.config_path}")

        try:
            crawler_config = CrawlerConfig(**(config_data.get('crawler') or {}))
            logging_config = LoggingConfig(**(config_data.get('logging') or {}))
        except TypeError as e:
            raise ValueError(f"Unknown configuration option: {e}")

        self._config = Config(crawler=crawler_config, logging=logging_config)
        self._validate_config()
        return self._config

    def _validate_config(self):
        """Validate configuration values."""
        if not self._config:
            raise ValueError("Configuration not loaded")
        validate_config(self._config)
        logging.getLogger(__name__).debug("Configuration validation passed")

    @property
    def config(self) -> Config:
        """Get the loaded configuration."""
        if not self._config:
            raise ValueError("Configuration not loaded. Call load_config() first.")
        return self._config


def validate_config(config: Config):
    """
    Check configuration values and normalize them in place.

    Raises:
        ValueError: if any value is out of range
    """
    from ..crawler.urls import coerce_seed_url

    crawler = config.crawler

    if isinstance(crawler.task_count, bool) or not isinstance(crawler.task_count, int):
        raise ValueError("task_count must be an integer")
    if crawler.task_count < 1:
        raise ValueError("task_count must be at least 1")

    crawler.max_depth = parse_depth(crawler.max_depth)

    if crawler.request_timeout <= 0:
        raise ValueError("request_timeout must be positive")

    if crawler.max_content_size <= 0:
        raise ValueError("max_content_size must be positive")

    if crawler.seed_url is not None:
        crawler.seed_url = coerce_seed_url(crawler.seed_url)

    if not isinstance(getattr(logging, str(config.logging.level).upper(), None), int):
        raise ValueError(f"Unknown log level: {config.logging.level}")


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> Config:
    """Get the global configuration instance."""
    return config_manager.config


def load_config(config_path: str = "config.yaml") -> Config:
    """Load configuration from file."""
    global config_manager
    config_manager = ConfigManager(config_path)
    return config_manager.load_config()
