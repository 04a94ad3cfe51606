import os
from flask import Flask
from flask_cors import CORS
from pymongo.errors import PyMongoError

from eventreg import config


def create_app(testing: bool = False, store=None, **overrides) -> Flask:
    """
    Application factory. `store` is the RegistrationStore to use; when omitted
    one is built over the configured MongoDB collection.
    """
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.SECRET_KEY,
        TESTING=testing,
        MAX_CONTENT_LENGTH=config.MAX_CONTENT_LENGTH,
        UPLOAD_DIR=config.UPLOAD_DIR,
        MAX_UPLOAD_BYTES=config.MAX_UPLOAD_BYTES,
        ADMIN_AUTH_VALUE=config.ADMIN_AUTH_VALUE,
    )
    app.config.update(overrides)

    CORS(
        app,
        origins=config.cors_origins(),
        methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["Content-Type", config.ADMIN_AUTH_HEADER],
        supports_credentials=True,
    )

    try:
        os.makedirs(app.config["UPLOAD_DIR"], exist_ok=True)
    except OSError as e:
        app.logger.warning(f"[create_app] upload dir not created: {e}")

    if store is None:
        from eventreg.db.mongo import get_collection
        from eventreg.storage.registrations import RegistrationStore
        store = RegistrationStore(get_collection(config.REGISTRATIONS_COLLECTION))

    from eventreg.api import STORE_KEY, register_api
    app.extensions[STORE_KEY] = store

    # Ensure DB indexes early (safe to run multiple times)
    try:
        store.ensure_indexes()
    except PyMongoError as e:
        app.logger.warning(f"[create_app] ensure_indexes skipped: {e}")

    from eventreg.errors import register_error_handlers
    from eventreg.web import register_web

    register_error_handlers(app)
    register_api(app)
    register_web(app)

    return app
