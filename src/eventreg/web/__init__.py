from __future__ import annotations
import os
from flask import Blueprint, current_app, send_from_directory


def uploaded_file(filename: str):
    """Read-only access to stored ID photos."""
    return send_from_directory(current_app.config["UPLOAD_DIR"], filename)


def register_web(app):
    # served under the upload dir's own name, matching the stored idPhotoPath;
    # built per app since the prefix comes from config
    prefix = os.path.basename(os.path.normpath(app.config["UPLOAD_DIR"]))
    bp = Blueprint("web", __name__)
    bp.add_url_rule(f"/{prefix}/<path:filename>", "uploaded_file", uploaded_file, methods=["GET"])
    app.register_blueprint(bp)
