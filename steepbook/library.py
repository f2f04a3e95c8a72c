"""In-memory session list and the import/export flows around it.

Sessions are identified by their position in the list: editing replaces the
session at an index, deleting removes it and shifts later sessions down.

UI-specific collaborators are passed in:
- notifier: object with success(message) and failure(message)
- deliver: download sink, deliver(content, filename, kind)
- confirm: yes/no gate called before an import overwrites the list
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Protocol

from .document import decode_json, export_json
from .messages import MESSAGES, ExchangeFormat
from .models import Session
from .reconcile import ImportResult
from .storage import SessionStore
from .tabular import DeliverFn, decode_csv, export_csv
from .timeutil import is_valid_datetime

logger = logging.getLogger(__name__)

DECODERS: Dict[str, Callable[[object], ImportResult]] = {
    "csv": decode_csv,
    "json": decode_json,
}

EXPORTERS = {
    "csv": export_csv,
    "json": export_json,
}


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def failure(self, message: str) -> None: ...


class SessionLibrary:
    """The user's sessions plus persistence and notification wiring."""

    def __init__(self, store: SessionStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier
        self.sessions: List[Session] = []
        self.editing_index: Optional[int] = None

    def load(self) -> None:
        """Replace the in-memory list with the stored sessions."""
        sessions, error = self.store.load()
        if error:
            self.notifier.failure(error)
            return
        self.sessions = sessions

    def _persist(self) -> None:
        error = self.store.save(self.sessions)
        if error:
            self.notifier.failure(error)

    def add_session(self, session: Session) -> None:
        self.sessions.append(session.filtered())
        self.notifier.success(MESSAGES["SESSION_SAVE_SUCCESS"])
        self._persist()

    def start_edit(self, index: int) -> Session:
        """Mark the session at index as being edited and return it."""
        session = self.sessions[index]
        self.editing_index = index
        return session

    def cancel_edit(self) -> None:
        self.editing_index = None

    def save_session(self, session: Session) -> bool:
        """Save a submitted form: replace the edited session or append a new one.

        Returns False without saving if the datetime is not a valid date-time.
        """
        if not is_valid_datetime(session.datetime):
            logger.warning("Rejected session with invalid datetime %r", session.datetime)
            self.notifier.failure(MESSAGES["SESSION_DATETIME_ERROR"])
            return False

        if self.editing_index is None:
            self.add_session(session)
        else:
            self.replace_session(self.editing_index, session)
            self.editing_index = None
        return True

    def replace_session(self, index: int, session: Session) -> None:
        """Replace the session at index. Raises IndexError if out of range."""
        if not 0 <= index < len(self.sessions):
            raise IndexError(f"No session at position {index}")
        self.sessions[index] = session.filtered()
        self.notifier.success(MESSAGES["SESSION_UPDATE_SUCCESS"])
        self._persist()

    def delete_session(self, index: int) -> Session:
        """Remove and return the session at index. Raises IndexError if out of range."""
        if not 0 <= index < len(self.sessions):
            raise IndexError(f"No session at position {index}")
        removed = self.sessions.pop(index)

        # positions after the deleted one shift down
        if self.editing_index is not None:
            if self.editing_index == index:
                self.editing_index = None
            elif self.editing_index > index:
                self.editing_index -= 1

        self.notifier.success(MESSAGES["SESSION_DELETE_SUCCESS"])
        self._persist()
        return removed

    def import_text(
        self,
        text: str,
        fmt: ExchangeFormat,
        *,
        confirm: Optional[Callable[[str], bool]] = None,
    ) -> Optional[ImportResult]:
        """Import file contents, overwriting the current sessions.

        Returns None if the user declined the confirmation, else the decode
        result. On failure the current sessions are left untouched; on partial
        success the valid sessions are applied and the partial error reported.
        A save failure is reported but the imported sessions stay in memory.
        """
        if confirm is not None and not confirm(MESSAGES["IMPORT_OVERWRITE_CONFIRM"]):
            logger.info("Import cancelled by user")
            return None

        result = DECODERS[fmt](text)

        if result.failed:
            self.notifier.failure(result.error)
            return result

        if result.partial:
            self.notifier.failure(result.error)
        else:
            self.notifier.success(MESSAGES["SESSION_IMPORT_SUCCESS"])

        self.sessions = list(result.sessions)
        self.editing_index = None
        self._persist()
        return result

    def export(self, fmt: ExchangeFormat, deliver: DeliverFn) -> Optional[str]:
        """Export all sessions. Returns the error message on failure."""
        error = EXPORTERS[fmt](self.sessions, deliver)
        if error:
            self.notifier.failure(error)
        return error
