from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List

import pymongo
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from eventreg import config
from eventreg.errors import DuplicateEmailError, NotFoundError
from eventreg.models.registration import validate_new, validate_update

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _object_id(registration_id: Any) -> ObjectId:
    if isinstance(registration_id, ObjectId):
        return registration_id
    try:
        return ObjectId(str(registration_id))
    except (InvalidId, TypeError) as e:
        raise NotFoundError() from e


class RegistrationStore:
    """
    The `registrations` collection. Built once per app and handed to the
    services; tests pass a mongomock collection instead of a real one.
    """

    def __init__(self, collection, clock: Callable[[], datetime] = utcnow,
                 ping_timeout: float = config.HEALTH_PING_TIMEOUT):
        self._coll = collection
        self._clock = clock
        self._ping_timeout = ping_timeout
        self._indexed = False

    def ensure_indexes(self) -> None:
        """Safe to call on every startup."""
        self._coll.create_index("email", unique=True, name="email_unique")
        self._coll.create_index([("registrationDate", DESCENDING)], name="registration_date_desc")
        self._indexed = True

    def ping(self) -> bool:
        # bounded, so a dead server can't stall the health check
        try:
            with pymongo.timeout(self._ping_timeout):
                self._coll.database.command("ping")
            return True
        except Exception as e:
            logger.error("Mongo ping failed: %s", e)
            return False

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        doc = validate_new(record)
        # email uniqueness rests on the index; never insert without it
        if not self._indexed:
            self.ensure_indexes()
        doc["isPresent"] = False
        doc["paymentMethod"] = None
        doc["registrationDate"] = self._clock()
        try:
            res = self._coll.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateEmailError(details={"email": doc["email"]}) from e
        doc["_id"] = res.inserted_id
        return doc

    def list_all(self) -> List[Dict[str, Any]]:
        return list(self._coll.find().sort("registrationDate", DESCENDING))

    def get_by_id(self, registration_id: Any) -> Dict[str, Any]:
        doc = self._coll.find_one({"_id": _object_id(registration_id)})
        if doc is None:
            raise NotFoundError()
        return doc

    def update_by_id(self, registration_id: Any, fields: Dict[str, Any]) -> Dict[str, Any]:
        changes = validate_update(fields)
        oid = _object_id(registration_id)
        doc = self._coll.find_one_and_update(
            {"_id": oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError()
        return doc

    def iter_selected_events(self) -> Iterator[List[str]]:
        for doc in self._coll.find({}, {"_id": 0, "selectedEvents": 1}):
            yield doc.get("selectedEvents") or []

    def count(self) -> int:
        return self._coll.count_documents({})
