"""
Static configuration management for the pet engine.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. This module
handles non-dynamic configuration that is set at application startup.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Validate critical settings on startup
- Track which values came from the environment and which from defaults

Non-Responsibilities
--------------------
- Game balance values (handled by ConfigManager + YAML defaults)
- Secrets management (use environment variables)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- Auto-loads on module import via Config.validate()
- Supports safe reload of non-critical values

Environment Variables
---------------------
- ENVIRONMENT: development | testing | staging | production (default: development)
- DEBUG: Debug mode flag (default: False)
- LOG_LEVEL: Logging level (default: INFO)
- LOG_JSON: Force JSON console logs (default: JSON only in production)
- LOG_COLORS: Colored console logs in development (default: True)
- LOG_TO_FILE: Also write a daily rotating JSON log file (default: False)
- LOGS_DIR: Directory for log files (default: ./logs)
- DATABASE_URL: SQLAlchemy async URL (default: local SQLite via aiosqlite)
- DATABASE_ECHO: Echo SQL statements (default: False)
- PETENGINE_CONFIG_DIR: Extra directory of YAML balance overrides (optional)
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not initialized yet during bootstrap
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


class _ConfigLoadMetrics:
    """
    Internal metrics tracker for configuration loading.

    Tracks which configuration values came from environment variables
    versus defaults, and any validation errors encountered.
    """

    def __init__(self) -> None:
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}
        self.last_reload: Optional[str] = None

    def record_env_load(self, key: str, from_env: bool, default: Any) -> None:
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str) -> None:
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
            "last_reload": self.last_reload,
        }


class Config:
    """
    Centralized static configuration for the pet engine.

    Usage
    -----
    >>> db_url = Config.DATABASE_URL
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    >>> summary = Config.get_config_summary()
    """

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOG_TO_FILE: bool = False
    LOGS_DIR: Path = Path.cwd() / "logs"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./petengine.db"
    DATABASE_ECHO: bool = False

    # Balance overrides
    CONFIG_DIR: Optional[Path] = None

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls) -> None:
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _record_error(cls, key: str, error: str) -> None:
        logging.warning(error)
        if cls._metrics:
            cls._metrics.record_validation_error(key, error)

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).

        Example
        -------
        >>> Config._safe_bool("DEBUG", False)
        False
        """
        cls._init_metrics()

        raw_value = os.getenv(key)
        if raw_value is None:
            if cls._metrics:
                cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.lower().strip()
        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            cls._record_error(
                key, f"{key}='{raw_value}' is not a valid boolean, using default {default}"
            )
            return default

        if cls._metrics:
            cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        """
        Safely get string from environment.

        Example
        -------
        >>> Config._safe_str("LOG_LEVEL", "INFO")
        'INFO'
        """
        cls._init_metrics()

        value = os.getenv(key, default)
        if cls._metrics:
            cls._metrics.record_env_load(key, key in os.environ, default)
        return value

    @classmethod
    def _safe_path(cls, key: str, default: Optional[Path]) -> Optional[Path]:
        cls._init_metrics()

        raw_value = os.getenv(key)
        if cls._metrics:
            cls._metrics.record_env_load(key, raw_value is not None, default)
        if not raw_value:
            return default
        return Path(raw_value).expanduser()

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables with validation.

        Called automatically on module import; may be called again to pick up
        environment changes (tests use this after patching `os.environ`).
        """
        cls._init_metrics()

        cls.ENVIRONMENT = cls._safe_str("ENVIRONMENT", "development")
        cls.DEBUG = bool(cls._safe_bool("DEBUG", False))

        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)
        cls.LOG_COLORS = bool(cls._safe_bool("LOG_COLORS", True))
        cls.LOG_TO_FILE = bool(cls._safe_bool("LOG_TO_FILE", False))
        cls.LOGS_DIR = cls._safe_path("LOGS_DIR", Path.cwd() / "logs") or Path.cwd() / "logs"

        cls.DATABASE_URL = cls._safe_str(
            "DATABASE_URL", "sqlite+aiosqlite:///./petengine.db"
        )
        cls.DATABASE_ECHO = bool(cls._safe_bool("DATABASE_ECHO", False))

        cls.CONFIG_DIR = cls._safe_path("PETENGINE_CONFIG_DIR", None)

        if cls._metrics:
            cls._metrics.last_reload = datetime.now(timezone.utc).isoformat()

    @classmethod
    def validate(cls) -> None:
        """
        Validate critical configuration values on startup.

        Raises
        ------
        ValueError
            If required values are missing in production.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        if not cls.DATABASE_URL:
            if cls.is_production():
                raise ValueError("DATABASE_URL environment variable is required")
            cls._record_error("DATABASE_URL", "DATABASE_URL is empty")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            cls._record_error("LOG_LEVEL", f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls.LOG_LEVEL = "INFO"

        if cls.is_production():
            if cls.DATABASE_URL.startswith("sqlite"):
                logger.warning("Production environment using SQLite database")
            if cls.DEBUG:
                logger.warning("DEBUG mode enabled in production!")

        cls._validated = True

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def environment(cls) -> Environment:
        return Environment.from_string(cls.ENVIRONMENT)

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing environment."""
        return cls.ENVIRONMENT.lower() == "testing"

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Optional[_ConfigLoadMetrics]:
        return cls._metrics

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """
        Get non-sensitive configuration summary for debugging.

        Example
        -------
        >>> Config.get_config_summary()["environment"]
        'development'
        """
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "log_to_file": cls.LOG_TO_FILE,
            "database_scheme": cls.DATABASE_URL.split("://", 1)[0],
            "config_dir": str(cls.CONFIG_DIR) if cls.CONFIG_DIR else None,
        }

    @classmethod
    def reload_safe_configs(cls) -> None:
        """
        Reload non-critical configuration values at runtime.

        Only the log level and the debug flag are reloaded; the database URL
        requires a restart.
        """
        logger = logging.getLogger(__name__)
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", cls.LOG_LEVEL)
        cls.DEBUG = bool(cls._safe_bool("DEBUG", cls.DEBUG))
        logger.info("Safe configuration values reloaded")


# Auto-validate on import
Config.validate()
