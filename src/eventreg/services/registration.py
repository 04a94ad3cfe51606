from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Union

from pymongo.errors import PyMongoError
from werkzeug.datastructures import FileStorage

from eventreg import config, uploads
from eventreg.errors import (
    DuplicateEmailError,
    InternalError,
    MissingFieldsError,
    NoEventSelectedError,
    ValidationError,
)
from eventreg.models.registration import clean_events, missing_fields
from eventreg.storage.registrations import RegistrationStore

logger = logging.getLogger(__name__)

# multipart sends text, JSON sends a list; either may reach us
EventsInput = Union[None, str, List[Any]]

_UNDECODABLE = object()


def normalize_selected_events(value: EventsInput) -> List[str]:
    """
    Resolve selectedEvents to a list of event names.

    A string is decoded as JSON: a decoded list is used as is, a decoded string
    becomes a one-element list, `null` means no events and an object is
    rejected. Numbers and undecodable text are kept whole as a single event
    name. Blank names are dropped.
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            decoded = _UNDECODABLE
        if decoded is None:
            return []
        if isinstance(decoded, dict):
            raise ValidationError("selectedEvents must be a list", field="selectedEvents")
        if isinstance(decoded, list):
            value = decoded
        elif isinstance(decoded, str):
            value = [decoded]
        else:
            value = [value]
    return clean_events(value)


def register(
    store: RegistrationStore,
    payload: Dict[str, Any],
    file: Optional[FileStorage] = None,
    upload_dir: str = config.UPLOAD_DIR,
    max_bytes: int = config.MAX_UPLOAD_BYTES,
) -> str:
    """Validate, store the photo, persist. Returns the new registration id."""
    events = normalize_selected_events(payload.get("selectedEvents"))

    missing = missing_fields(payload)
    if missing:
        raise MissingFieldsError(missing)
    if not events:
        raise NoEventSelectedError()

    photo_path = None
    if uploads.has_file(file):
        photo_path = uploads.accept(file, upload_dir, max_bytes=max_bytes)

    record = dict(payload)
    record["selectedEvents"] = events
    record["idPhotoPath"] = photo_path
    try:
        doc = store.create(record)
    except DuplicateEmailError:
        logger.info("Duplicate registration attempt for %s", str(payload.get("email", "")).strip().lower())
        _discard(photo_path, upload_dir)
        raise
    except PyMongoError as e:
        _discard(photo_path, upload_dir)
        raise InternalError("Registration failed") from e
    except Exception:
        _discard(photo_path, upload_dir)
        raise

    logger.info("Registered %s for %s (id=%s)", doc["email"], ", ".join(events), doc["_id"])
    return str(doc["_id"])


def _discard(photo_path: Optional[str], upload_dir: str) -> None:
    if photo_path:
        uploads.discard(photo_path, upload_dir)
