"""
ConfigManager: hierarchical game-balance configuration for the pet engine.

Purpose
-------
- Provide dot-notation access to tunable balance values
  (e.g. `"decay.hunger.interval_minutes"`).
- Back configuration with YAML defaults bundled in `defaults/`, optionally
  overlaid by a deployment directory (`Config.CONFIG_DIR`).
- Allow runtime overrides (hot balance changes, tests) that are validated
  before they are applied.

Key Design Decisions
--------------------
- YAML is the single source for **defaults**; overrides live in memory.
- All YAML files are deep-merged so balance can be split per concern
  (`pets.yaml`, `genetics.yaml`, `challenges.yaml`, `economy.yaml`).
- Reads never raise: a missing key returns the caller's default and is
  counted as a miss in metrics.
- Engines never read ConfigManager directly; they take typed settings
  dataclasses built with `from_config()`, which keeps them pure.

Dependencies
------------
- PyYAML for loading defaults
- `petengine.core.config.config.Config` for the optional overlay directory
- `petengine.core.logging.logger.get_logger` for structured logging
"""

from __future__ import annotations

import copy
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, MutableMapping, Optional

import yaml

from petengine.core.config.config import Config
from petengine.core.config.errors import ConfigInitializationError, ConfigWriteError
from petengine.core.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULTS_DIR = Path(__file__).resolve().parent / "defaults"

_MISSING = object()


@dataclass
class ConfigMetrics:
    """Read/write counters for configuration access."""

    gets: int = 0
    hits: int = 0
    misses: int = 0
    overrides: int = 0
    errors: int = 0
    total_get_time_ms: float = 0.0

    def snapshot(self) -> Dict[str, Any]:
        data = asdict(self)
        data["avg_get_time_ms"] = round(self.total_get_time_ms / self.gets, 4) if self.gets else 0.0
        return data


class ConfigManager:
    """
    Game-balance configuration with YAML defaults and validated overrides.

    Features
    --------
    - Hierarchical config access with dot notation.
    - Deep-merged YAML defaults plus optional overlay directory.
    - Runtime overrides guarded by per-key validators.
    - Read metrics for diagnostics.

    Thread Safety
    -------------
    Initialization and writes are guarded by a lock; reads traverse an
    immutable-by-convention dictionary and need no lock.
    """

    _defaults: Dict[str, Any] = {}
    _cache: Dict[str, Any] = {}
    _overrides: Dict[str, Any] = {}
    _validators: Dict[str, Callable[[Any], Any]] = {}

    _initialized: bool = False
    _lock = threading.RLock()
    _metrics: ConfigMetrics = ConfigMetrics()

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)  # type: ignore[index]
            else:
                target[key] = copy.deepcopy(value)

    @classmethod
    def _load_yaml_dir(cls, config_dir: Path, required: bool) -> int:
        """
        Deep-merge every YAML file in `config_dir` into `_defaults`.

        Files are processed in sorted order so overlays are deterministic.
        """
        if not config_dir.exists():
            if required:
                raise ConfigInitializationError(f"Config directory not found: {config_dir}")
            logger.warning(
                "Config overlay directory not found; skipping",
                extra={"config_dir": str(config_dir)},
            )
            return 0

        yaml_files = sorted(list(config_dir.rglob("*.yaml")) + list(config_dir.rglob("*.yml")))
        loaded_count = 0

        for yaml_file in yaml_files:
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                cls._metrics.errors += 1
                logger.error(
                    "Failed to load YAML config",
                    extra={
                        "file": str(yaml_file),
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )
                if required:
                    raise ConfigInitializationError(
                        f"Failed to load bundled config {yaml_file.name}"
                    ) from exc
                continue

            if isinstance(data, dict):
                cls._deep_merge_dict(cls._defaults, data)
                loaded_count += 1
                logger.debug("Loaded YAML config", extra={"file": str(yaml_file)})
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": str(yaml_file), "root_type": type(data).__name__},
                )

        return loaded_count

    @classmethod
    def _rebuild_cache(cls) -> None:
        cache = copy.deepcopy(cls._defaults)
        for key, value in cls._overrides.items():
            cls._assign_dotted(cache, key, value)
        cls._cache = cache

    @staticmethod
    def _assign_dotted(target: Dict[str, Any], key: str, value: Any) -> None:
        parts = key.split(".")
        node = target
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = copy.deepcopy(value)

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    @classmethod
    def initialize(cls, extra_dirs: Optional[List[Path]] = None) -> None:
        """
        Load bundled defaults and optional overlays (idempotent).

        Parameters
        ----------
        extra_dirs:
            Additional YAML directories merged after the bundled defaults and
            `Config.CONFIG_DIR`, in order.

        Raises
        ------
        ConfigInitializationError
            If the bundled defaults cannot be loaded.
        """
        if cls._initialized:
            return

        with cls._lock:
            if cls._initialized:
                return

            start = time.perf_counter()
            cls._defaults = {}

            file_count = cls._load_yaml_dir(DEFAULTS_DIR, required=True)
            overlay_dirs: List[Path] = []
            if Config.CONFIG_DIR:
                overlay_dirs.append(Config.CONFIG_DIR)
            overlay_dirs.extend(extra_dirs or [])
            for overlay in overlay_dirs:
                file_count += cls._load_yaml_dir(overlay, required=False)

            cls._rebuild_cache()
            cls._initialized = True

            logger.info(
                "ConfigManager initialized",
                extra={
                    "yaml_file_count": file_count,
                    "top_level_keys": sorted(cls._defaults.keys()),
                    "latency_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )

    @classmethod
    def reset(cls) -> None:
        """Drop overrides and reload defaults on next access. Used by tests."""
        with cls._lock:
            cls._defaults = {}
            cls._cache = {}
            cls._overrides = {}
            cls._initialized = False
            cls._metrics = ConfigMetrics()

    # =========================================================================
    # VALIDATION HOOKS
    # =========================================================================

    @classmethod
    def register_validator(cls, key: str, validator: Callable[[Any], Any]) -> None:
        """
        Register a validator for a specific configuration key path.

        Validators are invoked on `set_override` and must either return the
        (possibly transformed) value or raise to block the write.
        """
        cls._validators[key] = validator
        logger.debug(
            "ConfigManager validator registered",
            extra={
                "config_key": key,
                "validator": getattr(validator, "__name__", "anonymous"),
            },
        )

    @classmethod
    def _apply_validator(cls, key: str, value: Any) -> Any:
        validator = cls._validators.get(key)
        if not validator:
            return value

        try:
            return validator(value)
        except Exception as exc:
            cls._metrics.errors += 1
            logger.error(
                "Config validation failed",
                extra={
                    "config_key": key,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise ConfigWriteError(f"Validation failed for config key '{key}'") from exc

    # =========================================================================
    # READ API
    # =========================================================================

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Parameters
        ----------
        key:
            Dot-notation config path (e.g. `"economy.max_coins"`).
        default:
            Value to return if the key is not present.

        Returns
        -------
        Any
            A deep copy of the resolved value, or `default`.

        Examples
        --------
        >>> ConfigManager.get("progression.xp_per_level")
        100
        >>> ConfigManager.get("missing.key", 7)
        7
        """
        if not cls._initialized:
            cls.initialize()

        start_time = time.perf_counter()
        cls._metrics.gets += 1

        value: Any = cls._cache
        for part in key.split("."):
            if isinstance(value, dict) and part in value:
                value = value[part]
            else:
                value = _MISSING
                break

        cls._metrics.total_get_time_ms += (time.perf_counter() - start_time) * 1000

        if value is _MISSING or value is None:
            cls._metrics.misses += 1
            return default

        cls._metrics.hits += 1
        return copy.deepcopy(value)

    @classmethod
    def get_section(cls, key: str) -> Dict[str, Any]:
        """Return a mapping section, or an empty dict when absent."""
        value = cls.get(key, {})
        return value if isinstance(value, dict) else {}

    # =========================================================================
    # WRITE API
    # =========================================================================

    @classmethod
    def set_override(cls, key: str, value: Any) -> None:
        """
        Override a configuration value at runtime.

        Raises
        ------
        ConfigWriteError
            If a registered validator rejects the value.
        """
        if not cls._initialized:
            cls.initialize()

        final_value = cls._apply_validator(key, value)

        with cls._lock:
            old_value = cls.get(key)
            cls._overrides[key] = final_value
            cls._rebuild_cache()
            cls._metrics.overrides += 1

        logger.info(
            "Config override applied",
            extra={"config_key": key, "old_value": old_value, "new_value": final_value},
        )

    @classmethod
    def clear_overrides(cls) -> None:
        with cls._lock:
            cls._overrides = {}
            cls._rebuild_cache()

    # =========================================================================
    # METRICS
    # =========================================================================

    @classmethod
    def get_metrics(cls) -> Dict[str, Any]:
        snapshot = cls._metrics.snapshot()
        snapshot["override_keys"] = sorted(cls._overrides.keys())
        snapshot["initialized"] = cls._initialized
        return snapshot


__all__ = ["ConfigManager", "ConfigMetrics", "DEFAULTS_DIR"]
