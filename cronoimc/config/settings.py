"""Default configuration values for the cronoimc UI."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from cronoimc.storage import DEFAULT_STORAGE_KEY
from cronoimc.timer import DEFAULT_TICK_MS

DEFAULT_DATA_DIR = Path.home() / ".cronoimc"


@dataclass(slots=True)
class AppConfig:
    """Runtime settings for the desktop interface."""

    data_dir: Path = DEFAULT_DATA_DIR
    log_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR / "logs")
    storage_key: str = DEFAULT_STORAGE_KEY
    tick_ms: int = DEFAULT_TICK_MS
    log_level: str = "INFO"


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build the configuration from ``CRONOIMC_*`` environment variables."""

    source = os.environ if env is None else env
    data_dir = Path(source.get("CRONOIMC_DATA_DIR") or DEFAULT_DATA_DIR).expanduser()
    log_dir = Path(source.get("CRONOIMC_LOG_DIR") or data_dir / "logs").expanduser()
    log_level = (source.get("CRONOIMC_LOG_LEVEL") or "INFO").strip().upper()
    return AppConfig(data_dir=data_dir, log_dir=log_dir, log_level=log_level)


__all__ = ["AppConfig", "DEFAULT_DATA_DIR", "load_config"]
