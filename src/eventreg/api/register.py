from __future__ import annotations
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from eventreg import config
from eventreg.api import current_store
from eventreg.services.registration import register as register_attendee

bp = Blueprint("api_register", __name__)


def _payload() -> Dict[str, Any]:
    """
    Accept JSON or form-data. A repeated selectedEvents form field arrives
    as a list; a single one stays text and is decoded by the service.
    """
    if request.is_json:
        body = request.get_json(silent=True)
        return body if isinstance(body, dict) else {}

    payload: Dict[str, Any] = request.form.to_dict(flat=True)
    events = request.form.getlist("selectedEvents")
    if len(events) > 1:
        payload["selectedEvents"] = events
    return payload


@bp.post("/register")
def register():
    """
    POST /api/register
    Body: JSON or multipart with name, email, contact, college, course, sem,
    selectedEvents (list or JSON-encoded string) and optional file `idPhoto`.
    """
    registration_id = register_attendee(
        current_store(),
        _payload(),
        request.files.get(config.UPLOAD_FIELD),
        upload_dir=current_app.config["UPLOAD_DIR"],
        max_bytes=current_app.config["MAX_UPLOAD_BYTES"],
    )
    return jsonify({
        "success": True,
        "message": "Registration successful!",
        "registrationId": registration_id,
    }), 201
