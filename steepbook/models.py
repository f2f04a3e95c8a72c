"""Session record models and field classification.

Version History:
- v0.3: Added form construction and custom field label helpers
- v0.2: Added teaProducer/origin fields (replaces teaBrand)
- v0.1: Initial session model

A Session is one recorded tea-brewing event. Its wire shape (camelCase keys) is
shared by the CSV export, the JSON export and local storage, so the static field
order defined here is the column/key order of every serialized form. New fields
must be appended to OPTIONAL_FIELDS without reordering existing ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

REQUIRED_FIELDS: Tuple[str, ...] = ("datetime", "teaName")

OPTIONAL_FIELDS: Tuple[str, ...] = (
    "brewingVessel",
    "teaProducer",
    "origin",
    "purchaseLocation",
    "dryLeaf",
    "wetLeaf",
    "additionalNotes",
)

STATIC_FIELDS: Tuple[str, ...] = REQUIRED_FIELDS + OPTIONAL_FIELDS

STEEP_PREFIX = "steep-"
CUSTOM_PREFIX = "custom-"

_STEEP_COLUMN_RE = re.compile(r"^steep-([1-9]\d*)$")

# wire key -> attribute name
_ATTRS: Dict[str, str] = {
    "datetime": "datetime",
    "teaName": "tea_name",
    "brewingVessel": "brewing_vessel",
    "teaProducer": "tea_producer",
    "origin": "origin",
    "purchaseLocation": "purchase_location",
    "dryLeaf": "dry_leaf",
    "wetLeaf": "wet_leaf",
    "additionalNotes": "additional_notes",
}


def is_static_field(name: str) -> bool:
    return name in STATIC_FIELDS


def is_steep_column(name: str) -> bool:
    """True for ``steep-<n>`` column/key names with n >= 1."""
    return bool(_STEEP_COLUMN_RE.match(name))


def is_custom_column(name: str) -> bool:
    return name.startswith(CUSTOM_PREFIX)


def custom_field_key(label: str) -> str:
    """Turn a user-entered label into a stored custom field name.

    "Water Temp" -> "custom-water-temp"
    """
    slug = re.sub(r"\s+", "-", label.strip().lower())
    return f"{CUSTOM_PREFIX}{slug}"


def custom_field_label(name: str) -> str:
    """Turn a stored custom field name back into a display label.

    "custom-water-temp" -> "Water temp". Names without the prefix (e.g. from an
    imported JSON file) are only capitalized.
    """
    label = name[len(CUSTOM_PREFIX):] if name.startswith(CUSTOM_PREFIX) else name
    label = label.replace("-", " ").lower()
    return label[:1].upper() + label[1:]


@dataclass(frozen=True)
class CustomField:
    """User-defined name/value pair attached to a session."""

    name: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        """Serialize to dictionary."""
        return {"name": self.name, "value": self.value}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "CustomField":
        """Deserialize from dictionary."""
        return CustomField(name=data.get("name", ""), value=data.get("value", ""))


@dataclass
class Session:
    """One tea tasting session.

    Field Semantics:
    - datetime: Local date-time string, required, must parse
    - tea_name: Required key, may be empty
    - brewing_vessel .. additional_notes: Optional, always "" when unset
    - steeps: Infusion notes in brewing order
    - custom_fields: User-defined fields in entry order
    """

    datetime: str
    tea_name: str = ""
    brewing_vessel: str = ""
    tea_producer: str = ""
    origin: str = ""
    purchase_location: str = ""
    dry_leaf: str = ""
    wet_leaf: str = ""
    additional_notes: str = ""
    steeps: List[str] = field(default_factory=list)
    custom_fields: List[CustomField] = field(default_factory=list)

    def get_field(self, name: str) -> str:
        """Get a static field by its wire name (e.g. "teaName")."""
        return getattr(self, _ATTRS[name])

    def filtered(self) -> "Session":
        """Return a copy without empty steeps or empty-valued custom fields.

        The source session is left untouched. Filtering twice equals filtering once.
        """
        return replace(
            self,
            steeps=[s for s in self.steeps if s],
            custom_fields=[f for f in self.custom_fields if f.value],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary (static fields, then steeps, then customFields)."""
        data: Dict[str, Any] = {name: self.get_field(name) for name in STATIC_FIELDS}
        data["steeps"] = list(self.steeps)
        data["customFields"] = [f.to_dict() for f in self.custom_fields]
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Session":
        """Deserialize from dictionary with backward compatibility.

        Used for trusted data (local storage). Missing static fields are
        back-filled with "" so older saves load without migration.
        """
        static = {
            _ATTRS[name]: data.get(name) or ""
            for name in STATIC_FIELDS
        }
        return Session(
            **static,
            steeps=list(data.get("steeps") or []),
            custom_fields=[CustomField.from_dict(f) for f in data.get("customFields") or []],
        )

    @staticmethod
    def from_fields(values: Mapping[str, str]) -> "Session":
        """Build a session from wire-named static values, back-filling the rest."""
        return Session(**{_ATTRS[name]: values.get(name, "") for name in STATIC_FIELDS})

    @staticmethod
    def from_form(values: Mapping[str, Optional[str]]) -> "Session":
        """Build a session from flat form data.

        Static fields are taken by name, ``steep-<n>`` entries become steeps in
        the order they appear and ``custom-*`` entries become custom fields.
        Empty entries are kept here and dropped when the session is persisted or
        exported.
        """
        session = Session.from_fields(
            {name: values.get(name) or "" for name in STATIC_FIELDS}
        )
        for key, value in values.items():
            if value is None:
                continue
            if is_steep_column(key):
                session.steeps.append(value)
            elif is_custom_column(key):
                session.custom_fields.append(CustomField(name=key, value=value))
        return session
