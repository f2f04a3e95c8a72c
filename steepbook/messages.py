"""User-facing message text.

Library functions return these strings (or None) instead of raising; the UI
decides whether to show them as success or failure notifications.
"""

from typing import Dict, Literal

ExchangeFormat = Literal["csv", "json"]

MESSAGES: Dict[str, str] = {
    "SESSION_SAVE_SUCCESS": "Session saved successfully!",
    "SESSION_UPDATE_SUCCESS": "Session updated successfully!",
    "SESSION_DELETE_SUCCESS": "Session deleted.",
    "SESSION_SAVE_ERROR": "Error saving session",
    "SESSION_DATETIME_ERROR": "Please enter a valid date and time (YYYY-MM-DDTHH:MM).",

    "DELETE_SESSION_CONFIRM": "Are you sure you want to delete this session?",
    "IMPORT_OVERWRITE_CONFIRM": "Importing will overwrite your current sessions. Continue?",
    "IMPORT_CANCELLED": "Import cancelled. Tick the confirmation box to overwrite your sessions.",

    "LOCAL_STORAGE_LOAD_ERROR": "Error loading sessions from local storage.",

    "SESSION_IMPORT_SUCCESS": "Sessions imported successfully!",

    "CSV_EXPORT_SUCCESS": "Sessions exported to CSV.",
    "CSV_EXPORT_ERROR": "Error exporting sessions to CSV.",
    "CSV_IMPORT_ERROR": "Error importing sessions from CSV.",
    "CSV_IMPORT_ERROR_PARTIAL": "Some sessions in the CSV file were invalid and were skipped.",

    "JSON_EXPORT_SUCCESS": "Sessions exported to JSON.",
    "JSON_EXPORT_ERROR": "Error exporting sessions to JSON.",
    "JSON_IMPORT_ERROR": "Error importing sessions from JSON.",
    "JSON_IMPORT_ERROR_PARTIAL": "Some sessions in the JSON file were invalid and were skipped.",
}


def format_message(fmt: ExchangeFormat, kind: str) -> str:
    """Look up a per-format message, e.g. ("csv", "IMPORT_ERROR")."""
    return MESSAGES[f"{fmt.upper()}_{kind}"]
