"""Import outcome reconciliation shared by the CSV and JSON codecs.

Each codec turns its rows/elements into RecordResult values; this module
reduces them to exactly one of three outcomes:

- failure: no record succeeded (and there was at least one), nothing is returned
- success: no record failed, every session is returned
- partial: some records failed, the valid sessions are returned with a
  partial-error message the caller must still report
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .messages import ExchangeFormat, format_message
from .models import Session

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    FAILURE = "failure"
    SUCCESS = "success"
    PARTIAL = "partial"


@dataclass(frozen=True)
class RecordResult:
    """Result of decoding one candidate row or element."""

    session: Optional[Session]
    success: bool

    @staticmethod
    def ok(session: Session) -> "RecordResult":
        return RecordResult(session=session, success=True)

    @staticmethod
    def invalid() -> "RecordResult":
        return RecordResult(session=None, success=False)


@dataclass(frozen=True)
class ImportResult:
    """What a decode call hands back to the caller.

    Exactly one of: (no sessions, error), (sessions, no error),
    (sessions, partial error).
    """

    outcome: Outcome
    sessions: Optional[List[Session]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def partial(self) -> bool:
        return self.outcome is Outcome.PARTIAL

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAILURE

    @staticmethod
    def failure(fmt: ExchangeFormat) -> "ImportResult":
        """Whole-file failure (structural error or every record invalid)."""
        return ImportResult(
            outcome=Outcome.FAILURE,
            sessions=None,
            error=format_message(fmt, "IMPORT_ERROR"),
        )


def classify_outcome(flags: Iterable[bool]) -> Outcome:
    """Reduce per-record success flags to a single outcome.

    An empty sequence is a success: there was nothing to reject.
    """
    successes = failures = 0
    for flag in flags:
        if flag:
            successes += 1
        else:
            failures += 1

    if failures == 0:
        return Outcome.SUCCESS
    if successes == 0:
        return Outcome.FAILURE
    return Outcome.PARTIAL


def reconcile(results: Sequence[RecordResult], fmt: ExchangeFormat) -> ImportResult:
    """Combine per-record results into an ImportResult for the given format."""
    outcome = classify_outcome(r.success for r in results)

    if outcome is Outcome.FAILURE:
        logger.error("All %d imported %s sessions were invalid", len(results), fmt)
        return ImportResult.failure(fmt)

    sessions = [r.session for r in results if r.success and r.session is not None]

    if outcome is Outcome.PARTIAL:
        skipped = len(results) - len(sessions)
        logger.warning(
            "%d of %d %s sessions were invalid and skipped during import",
            skipped, len(results), fmt,
        )
        return ImportResult(
            outcome=Outcome.PARTIAL,
            sessions=sessions,
            error=format_message(fmt, "IMPORT_ERROR_PARTIAL"),
        )

    logger.info("Imported %d %s sessions", len(sessions), fmt)
    return ImportResult(outcome=Outcome.SUCCESS, sessions=sessions, error=None)
