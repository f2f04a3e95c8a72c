"""Persistent settings and logging setup."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE = Path(".steepbook_config.json")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    """Application settings.

    - storage_dir: Directory holding the stored session list
    - log_level: Name of the root logging level
    """

    storage_dir: str = "data"
    log_level: str = "INFO"

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Settings":
        """Deserialize from dictionary, filling missing keys with defaults."""
        defaults = Settings()
        return Settings(
            storage_dir=data.get("storage_dir", defaults.storage_dir),
            log_level=data.get("log_level", defaults.log_level),
        )


def load_config(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, falling back to defaults if missing or invalid."""
    path = path or CONFIG_FILE
    if path.exists():
        try:
            return Settings.from_dict(json.loads(path.read_text()))
        except Exception as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=numeric, format=LOG_FORMAT)
    root.setLevel(numeric)
