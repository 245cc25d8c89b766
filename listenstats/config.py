"""
Configuration for listening-history imports.

All environment variables and defaults are defined here. A ``.env`` file in the
working directory is loaded on first use when python-dotenv finds one.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_TOP_N = 10
DEFAULT_HEATMAP_DAYS = 365
DEFAULT_ALLOWED_SUFFIXES = (".csv", ".json")


def parse_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def parse_str_env(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def parse_list_env(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _default_data_dir() -> Path:
    """Default to ./data in the current working directory."""
    return Path.cwd() / "data"


@dataclass
class ImportConfig:
    top_n: int = DEFAULT_TOP_N
    heatmap_days: int = DEFAULT_HEATMAP_DAYS
    timezone: Optional[str] = None  # None = system local time
    allowed_suffixes: Tuple[str, ...] = DEFAULT_ALLOWED_SUFFIXES
    log_level: str = "INFO"
    data_dir: Path = field(default_factory=_default_data_dir)

    def __post_init__(self):
        if isinstance(self.data_dir, str):
            self.data_dir = Path(self.data_dir)
        self.allowed_suffixes = tuple(
            s.lower() if s.startswith(".") else f".{s.lower()}" for s in self.allowed_suffixes
        )
        if self.top_n < 1:
            raise ConfigurationError("top_n must be at least 1")
        if self.heatmap_days < 1:
            raise ConfigurationError("heatmap_days must be at least 1")

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "ImportConfig":
        """Build a config from LISTENSTATS_* environment variables."""
        env_path = Path(env_file) if env_file else Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        return cls(
            top_n=parse_int_env("LISTENSTATS_TOP_N", DEFAULT_TOP_N),
            heatmap_days=parse_int_env("LISTENSTATS_HEATMAP_DAYS", DEFAULT_HEATMAP_DAYS),
            timezone=parse_str_env("LISTENSTATS_TIMEZONE", None),
            allowed_suffixes=parse_list_env("LISTENSTATS_ALLOWED_SUFFIXES", DEFAULT_ALLOWED_SUFFIXES),
            log_level=parse_str_env("LISTENSTATS_LOG_LEVEL", "INFO"),
            data_dir=parse_str_env("LISTENSTATS_DATA_DIR", None) or _default_data_dir(),
        )
