from __future__ import annotations

import logging
from typing import Any, Dict, List

from eventreg.errors import InvalidPaymentMethodError, ValidationError
from eventreg.models.registration import PAYMENT_METHODS
from eventreg.storage.registrations import RegistrationStore

logger = logging.getLogger(__name__)


def list_registrations(store: RegistrationStore) -> List[Dict[str, Any]]:
    return store.list_all()


def set_attendance(store: RegistrationStore, registration_id: str, is_present: Any) -> Dict[str, Any]:
    if not isinstance(is_present, bool):
        raise ValidationError("isPresent must be a boolean", field="isPresent")
    doc = store.update_by_id(registration_id, {"isPresent": is_present})
    logger.info("Attendance for %s set to %s", registration_id, is_present)
    return doc


def set_payment(store: RegistrationStore, registration_id: str, payment_method: Any) -> Dict[str, Any]:
    # checked here so a bad value never reaches the database
    if payment_method not in PAYMENT_METHODS:
        raise InvalidPaymentMethodError(payment_method)
    doc = store.update_by_id(registration_id, {"paymentMethod": payment_method})
    logger.info("Payment for %s set to %s", registration_id, payment_method)
    return doc


def list_distinct_events(store: RegistrationStore) -> List[str]:
    seen = set()
    for events in store.iter_selected_events():
        seen.update(e for e in events if e)
    return sorted(seen)
