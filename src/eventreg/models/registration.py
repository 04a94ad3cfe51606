"""
Field rules for a Registration document and its JSON shape.

Documents are plain dicts (camelCase keys, as the frontend sends them):
    _id, name, email, contact, college, course, sem, selectedEvents,
    idPhotoPath, isPresent, paymentMethod, registrationDate
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from eventreg.errors import (
    InvalidContactError,
    InvalidEmailError,
    InvalidPaymentMethodError,
    MissingFieldsError,
    NoEventSelectedError,
    ValidationError,
)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CONTACT_RE = re.compile(r"^[6-9]\d{9}$")

REQUIRED_FIELDS = ("name", "email", "contact", "college", "course", "sem")
PAYMENT_METHODS = ("cash", "online", None)

# the only fields an update may touch
MUTABLE_FIELDS = ("isPresent", "paymentMethod")


def _text(field: str, value: Any) -> Optional[str]:
    """Trimmed text, or None when blank. Numbers are accepted as text."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be text", field=field)
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text", field=field)
    value = value.strip()
    return value or None


def missing_fields(payload: Dict[str, Any]) -> List[str]:
    missing = []
    for f in REQUIRED_FIELDS:
        v = payload.get(f)
        if v is None or (isinstance(v, str) and not v.strip()):
            missing.append(f)
    return missing


def clean_events(events: Any) -> List[str]:
    if events is None:
        return []
    if not isinstance(events, (list, tuple)):
        raise ValidationError("selectedEvents must be a list", field="selectedEvents")
    out: List[str] = []
    for ev in events:
        if not isinstance(ev, str):
            raise ValidationError("selectedEvents must only contain text", field="selectedEvents")
        ev = ev.strip()
        if ev:
            out.append(ev)
    return out


def validate_new(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate and normalise the client-supplied part of a Registration.
    Returns a fresh dict with only the known fields; status fields are never
    taken from the payload.
    """
    cleaned: Dict[str, Any] = {f: _text(f, payload.get(f)) for f in REQUIRED_FIELDS}

    missing = [f for f, v in cleaned.items() if v is None]
    if missing:
        raise MissingFieldsError(missing)

    cleaned["email"] = cleaned["email"].lower()
    if not EMAIL_RE.match(cleaned["email"]):
        raise InvalidEmailError(cleaned["email"])
    if not CONTACT_RE.match(cleaned["contact"]):
        raise InvalidContactError(cleaned["contact"])

    events = clean_events(payload.get("selectedEvents"))
    if not events:
        raise NoEventSelectedError()
    cleaned["selectedEvents"] = events

    photo = payload.get("idPhotoPath")
    if photo is not None and not isinstance(photo, str):
        raise ValidationError("idPhotoPath must be text", field="idPhotoPath")
    cleaned["idPhotoPath"] = photo or None
    return cleaned


def validate_update(fields: Dict[str, Any]) -> Dict[str, Any]:
    if not fields:
        raise ValidationError("Nothing to update")
    extra = sorted(set(fields) - set(MUTABLE_FIELDS))
    if extra:
        raise ValidationError(
            f"Field(s) cannot be updated: {', '.join(extra)}",
            details={"allowed": list(MUTABLE_FIELDS)},
        )
    if "isPresent" in fields and not isinstance(fields["isPresent"], bool):
        raise ValidationError("isPresent must be a boolean", field="isPresent")
    if "paymentMethod" in fields and fields["paymentMethod"] not in PAYMENT_METHODS:
        raise InvalidPaymentMethodError(fields["paymentMethod"])
    return dict(fields)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    # pymongo hands back naive UTC datetimes unless tz_aware is set
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def to_public(doc: Dict[str, Any]) -> Dict[str, Any]:
    """JSON-safe view of a stored document."""
    return {
        "_id": str(doc["_id"]),
        "name": doc.get("name"),
        "email": doc.get("email"),
        "contact": doc.get("contact"),
        "college": doc.get("college"),
        "course": doc.get("course"),
        "sem": doc.get("sem"),
        "selectedEvents": list(doc.get("selectedEvents") or []),
        "idPhotoPath": doc.get("idPhotoPath"),
        "isPresent": bool(doc.get("isPresent", False)),
        "paymentMethod": doc.get("paymentMethod"),
        "registrationDate": _iso(doc.get("registrationDate")),
    }
