"""CSV export and import of tea sessions.

Version History:
- v0.2: Partial imports keep valid rows; older files back-fill new columns
- v0.1: Initial CSV export

Column layout (stable, diffable):
    STATIC_FIELDS ++ steep-1..steep-N ++ custom field names (first-seen order)

N is the largest steep count across the exported sessions. Custom field names
are written verbatim as headers. On import only ``custom-``-prefixed headers are
read back as custom fields.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Callable, Dict, List, Optional, Sequence

from .messages import MESSAGES
from .models import (
    REQUIRED_FIELDS,
    STATIC_FIELDS,
    CustomField,
    Session,
    is_custom_column,
    is_static_field,
    is_steep_column,
)
from .reconcile import ImportResult, RecordResult, reconcile
from .timeutil import is_valid_datetime

logger = logging.getLogger(__name__)

CSV_FILENAME = "steepbook_sessions.csv"

# deliver(content, filename, kind)
DeliverFn = Callable[[str, str, str], None]


def steep_columns(sessions: Sequence[Session]) -> List[str]:
    """steep-1..steep-N where N is the widest steep list of filtered sessions."""
    max_steeps = max((len(s.steeps) for s in sessions), default=0)
    return [f"steep-{i + 1}" for i in range(max_steeps)]


def custom_columns(sessions: Sequence[Session]) -> List[str]:
    """Distinct non-empty custom field names in first-seen order."""
    names: Dict[str, None] = {}
    for session in sessions:
        for custom in session.custom_fields:
            names.setdefault(custom.name, None)
    return list(names)


def header_row(sessions: Sequence[Session]) -> List[str]:
    """Column names for filtered sessions: static fields, steeps, custom fields."""
    return [*STATIC_FIELDS, *steep_columns(sessions), *custom_columns(sessions)]


def session_row(session: Session, n_steeps: int, custom_names: Sequence[str]) -> List[str]:
    """Cells for one (already filtered) session, aligned with header_row."""
    values = {f.name: f.value for f in reversed(session.custom_fields)}
    return [
        *(session.get_field(name) for name in STATIC_FIELDS),
        *(session.steeps[i] if i < len(session.steeps) else "" for i in range(n_steeps)),
        *(values.get(name, "") for name in custom_names),
    ]


def encode_csv(sessions: Sequence[Session]) -> str:
    """Serialize sessions to CSV text (header row always present)."""
    cloned = [s.filtered() for s in sessions]
    header = header_row(cloned)
    n_steeps = len(steep_columns(cloned))
    customs = header[len(STATIC_FIELDS) + n_steeps:]

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\r\n")
    writer.writerow(header)
    for session in cloned:
        writer.writerow(session_row(session, n_steeps, customs))
    return buffer.getvalue()


def export_csv(sessions: Sequence[Session], deliver: DeliverFn) -> Optional[str]:
    """Encode sessions and hand the file to the download sink.

    Returns CSV_EXPORT_ERROR on failure (nothing is delivered), else None.
    """
    try:
        content = encode_csv(sessions)
    except Exception as e:
        logger.exception("Error exporting to CSV: %s", e)
        return MESSAGES["CSV_EXPORT_ERROR"]

    deliver(content, CSV_FILENAME, "csv")
    logger.debug("Exported %d sessions to %s", len(sessions), CSV_FILENAME)
    return None


def _parse_rows(text: str) -> List[List[str]]:
    """Parse CSV text, skipping blank lines. Raises csv.Error on malformed input."""
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    return [row for row in reader if row]


def _decode_row(columns: Sequence[str], cells: Sequence[str]) -> RecordResult:
    """Build one candidate session from a data row and validate it."""
    static: Dict[str, str] = {}
    steeps: List[str] = []
    custom_fields: List[CustomField] = []

    # zip() drops cells beyond the header width
    for column, cell in zip(columns, cells):
        if is_static_field(column):
            static[column] = cell
        elif is_steep_column(column):
            if cell:
                steeps.append(cell)
        elif is_custom_column(column):
            if cell:
                custom_fields.append(CustomField(name=column, value=cell))

    # Columns absent from older exports (or short rows) back-fill to ""
    session = Session.from_fields(static)
    session.steeps = steeps
    session.custom_fields = custom_fields

    if not is_valid_datetime(session.datetime):
        logger.debug("Invalid session row: datetime missing or invalid (%r)", session.datetime)
        return RecordResult.invalid()
    return RecordResult.ok(session)


def decode_csv(text: object) -> ImportResult:
    """Parse CSV text into sessions.

    Whole-file failures (wrong type, empty input, malformed CSV, header only,
    missing required headers) return a failure result. Otherwise each row is
    validated independently and the results are reconciled.
    """
    if not isinstance(text, str):
        logger.error("Invalid CSV format: expected string but got %s", type(text).__name__)
        return ImportResult.failure("csv")

    if not text.strip():
        logger.error("Invalid CSV format: empty input")
        return ImportResult.failure("csv")

    try:
        rows = _parse_rows(text)
    except csv.Error as e:
        logger.error("CSV parsing failed: %s", e)
        return ImportResult.failure("csv")

    if len(rows) < 2:
        logger.error("Invalid CSV format: no data rows")
        return ImportResult.failure("csv")

    columns, *data = rows
    missing = [name for name in REQUIRED_FIELDS if name not in columns]
    if missing:
        logger.error("Invalid CSV format: missing header columns %s", ", ".join(missing))
        return ImportResult.failure("csv")

    return reconcile([_decode_row(columns, cells) for cells in data], "csv")
