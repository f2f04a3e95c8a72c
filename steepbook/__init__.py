"""Steepbook: tea session log with CSV and JSON exchange."""

from .document import decode_json, encode_json, export_json
from .library import SessionLibrary
from .models import STATIC_FIELDS, CustomField, Session
from .reconcile import ImportResult, Outcome
from .storage import SessionStore
from .tabular import decode_csv, encode_csv, export_csv

__all__ = [
    "STATIC_FIELDS",
    "CustomField",
    "ImportResult",
    "Outcome",
    "Session",
    "SessionLibrary",
    "SessionStore",
    "decode_csv",
    "decode_json",
    "encode_csv",
    "encode_json",
    "export_csv",
    "export_json",
]
