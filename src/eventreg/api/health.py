from __future__ import annotations
import time
from datetime import datetime, timezone
from flask import Blueprint, jsonify

from eventreg.api import current_store

bp = Blueprint("api_health", __name__)

_STARTED = time.monotonic()


@bp.get("/health")
def health():
    db_ok = current_store().ping()

    return jsonify({
        "status": "OK",
        "database": "Connected" if db_ok else "Disconnected",
        "uptime": round(time.monotonic() - _STARTED, 3),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })
