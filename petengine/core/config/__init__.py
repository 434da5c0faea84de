"""
Configuration layer.

- `Config`: static, environment-driven settings (python-dotenv).
- `ConfigManager`: game-balance values from bundled YAML with overrides.
"""

from petengine.core.config.config import Config, Environment
from petengine.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigValidationError,
    ConfigWriteError,
)
from petengine.core.config.manager import ConfigManager

__all__ = [
    "Config",
    "Environment",
    "ConfigManager",
    "ConfigError",
    "ConfigInitializationError",
    "ConfigValidationError",
    "ConfigWriteError",
]
