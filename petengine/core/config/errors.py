"""
Configuration error hierarchy.

Exception Hierarchy
-------------------
ConfigError (base)
├── ConfigValidationError (type/shape validation failures)
├── ConfigWriteError (override rejected)
└── ConfigInitializationError (YAML defaults could not be loaded)
"""


class ConfigError(Exception):
    """
    Base exception for all configuration-related errors.

    Example
    -------
    >>> try:
    ...     ConfigManager.set_override("decay.hunger.interval_minutes", 0)
    ... except ConfigError as e:
    ...     logger.error(f"Config operation failed: {e}")
    """


class ConfigValidationError(ConfigError):
    """
    Raised when configuration validation fails.

    This exception is raised when:
    - A value has the wrong type (e.g. a string where an int is expected)
    - A value is out of range (e.g. a non-positive decay interval)
    - A required section is missing
    """


class ConfigWriteError(ConfigError):
    """Raised when a configuration override is rejected by its validator."""


class ConfigInitializationError(ConfigError):
    """
    Raised when ConfigManager initialization fails.

    This is a critical error: the bundled YAML defaults are part of the
    package, so failing to read them means the installation is broken.
    """


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConfigWriteError",
    "ConfigInitializationError",
]
