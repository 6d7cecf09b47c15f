"""Configuration module: frozen dataclass loaded from env vars or a YAML section."""

import logging
import os
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

MB = 1024 * 1024


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class RotationConfig:
    base_path: str = "./logs/application.log"
    max_size_bytes: int = 100 * MB
    max_backups: int = 5
    backup_interval_seconds: float = 24 * 3600
    compress_backups: bool = True
    # Test-only: keep handles on background tasks so tests can wait on them.
    wait_for_background: bool = False

    def __post_init__(self):
        if not self.base_path:
            raise ValueError("base_path must not be empty")
        for name in ("max_size_bytes", "max_backups", "backup_interval_seconds"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

    @classmethod
    def from_dict(cls, d: dict) -> "RotationConfig":
        """Build from a ``rotation:`` mapping; ``max_size_bytes`` wins over ``max_size_mb``."""
        if "max_size_bytes" in d:
            max_size = int(d["max_size_bytes"])
        elif "max_size_mb" in d:
            max_size = int(float(d["max_size_mb"]) * MB)
        else:
            max_size = cls.max_size_bytes

        return cls(
            base_path=d.get("base_path", cls.base_path),
            max_size_bytes=max_size,
            max_backups=int(d.get("max_backups", cls.max_backups)),
            backup_interval_seconds=float(
                d.get("backup_interval_seconds", cls.backup_interval_seconds)
            ),
            compress_backups=_parse_bool(d.get("compress_backups", cls.compress_backups)),
            wait_for_background=_parse_bool(d.get("wait_for_background", False)),
        )


def load_config() -> RotationConfig:
    """Build RotationConfig from environment variables with sensible defaults."""
    # MAX_SIZE_BYTES takes precedence over MAX_SIZE_MB
    raw_bytes = os.environ.get("MAX_SIZE_BYTES")
    raw_mb = os.environ.get("MAX_SIZE_MB")
    if raw_bytes is not None:
        max_size = int(raw_bytes)
    elif raw_mb is not None:
        max_size = int(float(raw_mb) * MB)
    else:
        max_size = RotationConfig.max_size_bytes

    return RotationConfig(
        base_path=os.environ.get("LOG_PATH", RotationConfig.base_path),
        max_size_bytes=max_size,
        max_backups=int(os.environ.get("MAX_BACKUPS", RotationConfig.max_backups)),
        backup_interval_seconds=float(
            os.environ.get("BACKUP_INTERVAL_SECONDS", RotationConfig.backup_interval_seconds)
        ),
        compress_backups=_parse_bool(os.environ.get("COMPRESS_BACKUPS", "true")),
    )


def load_yaml_config(path: str | None) -> dict:
    """Load a YAML file. Returns empty dict if no path or the file is missing."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
        return data
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}


def resolve_config(path: str | None = None) -> RotationConfig:
    """Environment config, overridden by the ``rotation:`` section of the YAML file.

    The YAML path defaults to the ``CONFIG_PATH`` environment variable.
    """
    base = load_config()
    yaml_data = load_yaml_config(path or os.environ.get("CONFIG_PATH"))
    section = yaml_data.get("rotation") or {}
    if not section:
        return base

    merged = {
        "base_path": base.base_path,
        "max_size_bytes": base.max_size_bytes,
        "max_backups": base.max_backups,
        "backup_interval_seconds": base.backup_interval_seconds,
        "compress_backups": base.compress_backups,
    }
    if "max_size_mb" in section and "max_size_bytes" not in section:
        merged.pop("max_size_bytes")
    merged.update(section)
    return RotationConfig.from_dict(merged)
