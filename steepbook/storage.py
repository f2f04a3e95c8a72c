"""Local persistence of the session list.

The whole list is stored as serialized JSON under one fixed key, one file per
key in the storage directory. Loaded data is trusted: it is back-filled but not
re-validated.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .messages import MESSAGES
from .models import Session

logger = logging.getLogger(__name__)

STORAGE_KEY = "steepbook_sessions"


class SessionStore:
    """Key-value gateway holding the canonical session list."""

    def __init__(self, storage_dir: Path, key: str = STORAGE_KEY):
        self.storage_dir = Path(storage_dir)
        self.key = key

    def get_path(self) -> Path:
        """Get filesystem path for the stored key."""
        return self.storage_dir / f"{self.key}.json"

    def save(self, sessions: Sequence[Session]) -> Optional[str]:
        """Persist the session list. Returns SESSION_SAVE_ERROR on failure."""
        try:
            path = self.get_path()
            path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps([s.filtered().to_dict() for s in sessions], ensure_ascii=False)
            path.write_text(payload, encoding="utf-8")
        except Exception as e:
            logger.error("Error saving sessions to %s: %s", self.storage_dir, e)
            return MESSAGES["SESSION_SAVE_ERROR"]

        logger.debug("Saved %d sessions to %s", len(sessions), path)
        return None

    def load(self) -> Tuple[List[Session], Optional[str]]:
        """Load the session list.

        Returns (sessions, None), or ([], LOCAL_STORAGE_LOAD_ERROR) if the
        stored value cannot be read. A missing key is an empty list.
        """
        path = self.get_path()
        if not path.exists():
            return [], None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            sessions = [Session.from_dict(item) for item in data]
        except Exception as e:
            logger.error("Error retrieving sessions from %s: %s", path, e)
            return [], MESSAGES["LOCAL_STORAGE_LOAD_ERROR"]

        logger.debug("Loaded %d sessions from %s", len(sessions), path)
        return sessions, None
