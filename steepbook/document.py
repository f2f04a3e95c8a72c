"""JSON export and import of tea sessions.

The document is an array of session objects, indented with 2 spaces. Key order
follows STATIC_FIELDS, then steeps, then customFields, so exports diff cleanly.
Older files missing newer optional fields import with those fields set to "".
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional, Sequence

from .messages import MESSAGES
from .models import OPTIONAL_FIELDS, CustomField, Session
from .reconcile import ImportResult, RecordResult, reconcile
from .tabular import DeliverFn
from .timeutil import normalize_datetime

logger = logging.getLogger(__name__)

JSON_FILENAME = "steepbook_sessions.json"


def encode_json(sessions: Sequence[Session]) -> str:
    """Serialize filtered sessions as an indented JSON array."""
    return json.dumps(
        [s.filtered().to_dict() for s in sessions],
        indent=2,
        ensure_ascii=False,
    )


def export_json(sessions: Sequence[Session], deliver: DeliverFn) -> Optional[str]:
    """Encode sessions and hand the file to the download sink.

    Returns JSON_EXPORT_ERROR on failure (nothing is delivered), else None.
    """
    try:
        content = encode_json(sessions)
    except Exception as e:
        logger.exception("Error exporting to JSON: %s", e)
        return MESSAGES["JSON_EXPORT_ERROR"]

    deliver(content, JSON_FILENAME, "json")
    logger.debug("Exported %d sessions to %s", len(sessions), JSON_FILENAME)
    return None


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _decode_element(element: Any) -> RecordResult:
    """Validate and normalize one array element."""
    if not isinstance(element, dict):
        logger.debug("Invalid session: expected object, got %s", type(element).__name__)
        return RecordResult.invalid()

    datetime_text = normalize_datetime(element.get("datetime"))
    if datetime_text is None:
        logger.debug("Invalid session: datetime missing or invalid (%r)", element.get("datetime"))
        return RecordResult.invalid()

    tea_name = element.get("teaName")
    if not isinstance(tea_name, str):
        logger.debug("Invalid session: teaName missing")
        return RecordResult.invalid()

    values = {name: _as_text(element.get(name)) for name in OPTIONAL_FIELDS}
    values["datetime"] = datetime_text
    values["teaName"] = tea_name
    session = Session.from_fields(values)

    steeps = element.get("steeps")
    if isinstance(steeps, list):
        session.steeps = [s for s in steeps if _non_blank(s)]

    custom_fields = element.get("customFields")
    if isinstance(custom_fields, list):
        session.custom_fields = [
            CustomField(name=f["name"], value=f["value"])
            for f in custom_fields
            if isinstance(f, dict) and _non_blank(f.get("name")) and _non_blank(f.get("value"))
        ]

    return RecordResult.ok(session)


def decode_json(text: object) -> ImportResult:
    """Parse JSON text into sessions.

    Fails as a whole if the text is not valid JSON or the top-level value is
    not an array. Each element is then validated independently and the results
    are reconciled; an empty array is a successful import of nothing.
    """
    if not isinstance(text, str):
        logger.error("Invalid JSON format: expected string but got %s", type(text).__name__)
        return ImportResult.failure("json")

    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        logger.error("JSON parsing failed: %s", e)
        return ImportResult.failure("json")

    if not isinstance(data, list):
        logger.error("Invalid JSON format: expected an array of sessions, got %s", type(data).__name__)
        return ImportResult.failure("json")

    results: List[RecordResult] = [_decode_element(element) for element in data]
    return reconcile(results, "json")
