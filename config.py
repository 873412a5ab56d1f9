#!/usr/bin/env python3
"""
Configuration management for Boring Reader.

This module centralizes configuration loading, validation, and logging setup.
Values come from environment variables, an optional .env file, and an optional
YAML file (reader.yaml) holding the proxy chain and readability tuning knobs.
"""

from os import environ, path, access, R_OK
from typing import Any, Dict, List
from logging import getLogger, basicConfig, StreamHandler, INFO, DEBUG, WARNING, ERROR
import sys
import yaml
from dotenv import load_dotenv

DEFAULT_PROXIES = [
    "https://api.allorigins.win/raw?url={url}",
    "https://thingproxy.freeboard.io/fetch/{url}",
]

DEFAULT_READABILITY = {
    "debug": False,
    "max_elems_to_parse": 0,
    "nb_top_candidates": 10,
    "char_threshold": 250,
    "classes_to_preserve": ["caption", "credit", "highlight"],
}


def _setup_global_logger():
    """Setup a single global logger for the entire application.

    Environment Variables:
        LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR) - defaults to INFO
        LOG_TIMESTAMPS: Enable/disable timestamps in logs (true/false) - defaults to true

    All modules should use get_logger() to create module-specific loggers that
    inherit this configuration.
    """
    level_str = environ.get("LOG_LEVEL", "INFO").upper()
    level_map = {
        "DEBUG": DEBUG,
        "INFO": INFO,
        "WARNING": WARNING,
        "ERROR": ERROR
    }
    level = level_map.get(level_str, INFO)

    show_timestamps = environ.get("LOG_TIMESTAMPS", "true").lower() != "false"
    if show_timestamps:
        log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    else:
        log_format = '%(name)s - %(levelname)s - %(message)s'

    basicConfig(
        level=level,
        format=log_format,
        handlers=[StreamHandler(sys.stdout)],
        force=True
    )

    # Pytest and some embedders swap stdout for objects without reconfigure()
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if callable(reconfigure):
        reconfigure(line_buffering=True)

    # aiohttp access logs are noisy at INFO
    getLogger("aiohttp.access").setLevel(max(level, WARNING))

    return getLogger("BoringReader")


def get_logger(name: str):
    """Get a module-specific logger with the unified configuration.

    Args:
        name: The logger name (e.g., "extractor", "fetcher", "proxies")

    Returns:
        A logger named "BoringReader.{name}"
    """
    return getLogger(f"BoringReader.{name}")


logger = _setup_global_logger()


class Config:
    """Configuration manager for Boring Reader.

    Loading order:
    1. Environment variables
    2. .env file (if present, does not override existing variables)
    3. reader.yaml (or READER_CONFIG_PATH) for the proxy chain and readability knobs

    Example reader.yaml:
    ```yaml
    proxies:
      - "https://api.allorigins.win/raw?url={url}"
      - type: http
        url: "http://proxy.internal:3128"
      - direct
    readability:
      char_threshold: 500
      nb_top_candidates: 5
    ```
    """

    def __init__(self):
        """Initialize configuration with environment variables and validation."""
        self._load_environment()
        self._validate_and_set_config()
        self._load_reader_file()

    def _load_environment(self):
        """Load environment variables from a .env file beside this module."""
        dotenv_path = path.join(path.dirname(path.abspath(__file__)), '.env')
        if path.exists(dotenv_path):
            load_dotenv(dotenv_path)
            logger.info(f"Loaded environment variables from {dotenv_path}")

    def _validate_positive_int(self, env_var: str, default: int, min_val: int = 1) -> int:
        """Validate and parse a positive integer environment variable."""
        try:
            value = int(environ.get(env_var, str(default)))
            if value < min_val:
                logger.warning(f"{env_var} must be at least {min_val}, using default {default}")
                return default
            return value
        except (ValueError, TypeError):
            logger.warning(f"Invalid {env_var} value, using default {default}")
            return default

    def _validate_positive_float(self, env_var: str, default: float, min_val: float = 0.0) -> float:
        """Validate and parse a non-negative float environment variable."""
        try:
            value = float(environ.get(env_var, str(default)))
            if value < min_val:
                logger.warning(f"{env_var} must be at least {min_val}, using default {default}")
                return default
            return value
        except (ValueError, TypeError):
            logger.warning(f"Invalid {env_var} value, using default {default}")
            return default

    def _validate_and_set_config(self):
        """Validate and set all configuration values."""
        self.USER_AGENT = environ.get(
            "USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        )

        # HTTP request configuration
        self.HTTP_TIMEOUT = self._validate_positive_float("HTTP_TIMEOUT", 10.0, 1.0)
        self.MAX_ATTEMPTS = self._validate_positive_int("MAX_ATTEMPTS", 3, 1)
        self.RETRY_DELAY_BASE = self._validate_positive_float("RETRY_DELAY_BASE", 1.0, 0.0)
        self.REQUEST_JITTER_MIN = self._validate_positive_float("REQUEST_JITTER_MIN", 0.2, 0.0)
        self.REQUEST_JITTER_MAX = self._validate_positive_float("REQUEST_JITTER_MAX", 0.8, 0.0)
        if self.REQUEST_JITTER_MAX < self.REQUEST_JITTER_MIN:
            logger.warning("REQUEST_JITTER_MAX is below REQUEST_JITTER_MIN; using the minimum for both")
            self.REQUEST_JITTER_MAX = self.REQUEST_JITTER_MIN

        # Result cache
        self.CACHE_CAPACITY = self._validate_positive_int("CACHE_CAPACITY", 100, 1)
        self.CACHE_TTL_SECONDS = self._validate_positive_float("CACHE_TTL_SECONDS", 0.0, 0.0)

        # Reading statistics
        self.WORDS_PER_MINUTE = self._validate_positive_int("WORDS_PER_MINUTE", 200, 1)

        # HTTP surface
        self.SERVER_HOST = environ.get("SERVER_HOST", "127.0.0.1")
        self.SERVER_PORT = self._validate_positive_int("SERVER_PORT", 8080, 1)

        base_dir = path.dirname(path.abspath(__file__))
        self.READER_CONFIG_PATH = environ.get("READER_CONFIG_PATH", path.join(base_dir, "reader.yaml"))

    def _safe_read_yaml(self, file_path: str, max_size: int, kind: str) -> Any | None:
        """Safely read a YAML file with consistent validation.

        Returns:
            Parsed YAML or None on failure (failures are logged, never raised).
        """
        try:
            if not path.isfile(file_path):
                logger.debug(f"{kind.capitalize()} file not found at {file_path}")
                return None
            if not access(file_path, R_OK):
                logger.error(f"No read permission for {kind} file at {file_path}")
                return None
            size = path.getsize(file_path)
            if size > max_size:
                logger.error(f"{kind.capitalize()} file too large: {size} bytes (limit: {max_size} bytes)")
                return None
            with open(file_path, 'r') as f:
                data = yaml.safe_load(f)
            if not data:
                logger.warning(f"Empty or invalid YAML in {kind} file {file_path}")
                return None
            return data
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML in {kind} file {file_path}: {e}")
        except OSError as e:
            logger.error(f"Error loading {kind} file {file_path}: {e}")
        return None

    def _load_reader_file(self) -> None:
        """Populate PROXIES and READABILITY from reader.yaml, keeping defaults on any problem."""
        self.PROXIES: List[Any] = list(DEFAULT_PROXIES)
        self.READABILITY: Dict[str, Any] = dict(DEFAULT_READABILITY)

        data = self._safe_read_yaml(self.READER_CONFIG_PATH, 1024 * 1024, 'reader')
        if not isinstance(data, dict):
            if data is not None:
                logger.warning(f"{self.READER_CONFIG_PATH} must be a YAML mapping at the top level")
            return

        proxies = data.get('proxies')
        if isinstance(proxies, list) and proxies:
            self.PROXIES = proxies
            logger.info(f"Loaded {len(proxies)} proxy entries from {self.READER_CONFIG_PATH}")
        elif proxies is not None:
            logger.warning(f"Invalid proxies section in {self.READER_CONFIG_PATH}; keeping defaults")

        readability = data.get('readability')
        if isinstance(readability, dict):
            for key, value in readability.items():
                if key not in DEFAULT_READABILITY:
                    logger.warning(f"Unknown readability option '{key}' in {self.READER_CONFIG_PATH}")
                    continue
                self.READABILITY[key] = value
        elif readability is not None:
            logger.warning(f"Invalid readability section in {self.READER_CONFIG_PATH}; keeping defaults")

    def get_config_summary(self) -> Dict[str, Any]:
        """Get a summary of current configuration for logging/debugging."""
        return {
            "http_timeout": self.HTTP_TIMEOUT,
            "max_attempts": self.MAX_ATTEMPTS,
            "retry_delay_base": self.RETRY_DELAY_BASE,
            "cache_capacity": self.CACHE_CAPACITY,
            "cache_ttl_seconds": self.CACHE_TTL_SECONDS,
            "proxy_count": len(self.PROXIES),
            "readability": dict(self.READABILITY),
        }


# Global configuration instance
config = Config()
