from __future__ import annotations

import hmac
import logging
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pymongo.errors import PyMongoError

from eventreg import config
from eventreg.api import current_store
from eventreg.errors import InternalError, UnauthorizedError, ValidationError
from eventreg.models.registration import to_public
from eventreg.services import admin as admin_service

bp = Blueprint("api_admin", __name__, url_prefix="/admin")

logger = logging.getLogger(__name__)


@bp.before_request
def check_admin_auth():
    if request.method == "OPTIONS":
        # CORS preflight never carries the header
        return None
    sent = request.headers.get(config.ADMIN_AUTH_HEADER, "")
    expected = current_app.config["ADMIN_AUTH_VALUE"]
    # constant-time compare
    if not hmac.compare_digest(sent.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Rejected admin request %s %s", request.method, request.path)
        raise UnauthorizedError()


def _json_body() -> Dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


@bp.get("/registrations")
def list_registrations():
    """
    GET /api/admin/registrations
    All registrations, newest first.
    """
    try:
        docs = admin_service.list_registrations(current_store())
    except PyMongoError as e:
        raise InternalError("Failed to fetch registrations") from e
    return jsonify([to_public(d) for d in docs])


@bp.put("/attendance/<registration_id>")
def update_attendance(registration_id: str):
    """
    PUT /api/admin/attendance/<id>   {"isPresent": true|false}
    """
    body = _json_body()
    try:
        doc = admin_service.set_attendance(current_store(), registration_id, body.get("isPresent"))
    except PyMongoError as e:
        raise InternalError("Attendance update failed") from e
    return jsonify(to_public(doc))


@bp.put("/payment/<registration_id>")
def update_payment(registration_id: str):
    """
    PUT /api/admin/payment/<id>   {"paymentMethod": "cash"|"online"|null}
    A missing key counts as null, which clears the payment.
    """
    body = _json_body()
    try:
        doc = admin_service.set_payment(current_store(), registration_id, body.get("paymentMethod"))
    except PyMongoError as e:
        raise InternalError("Payment update failed") from e
    return jsonify(to_public(doc))


@bp.get("/events")
def list_events():
    """
    GET /api/admin/events
    Distinct event names across all registrations, sorted.
    """
    try:
        events = admin_service.list_distinct_events(current_store())
    except PyMongoError as e:
        raise InternalError("Failed to fetch events") from e
    return jsonify(events)
