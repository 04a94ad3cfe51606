from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base for every error that maps onto an HTTP response."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


# ---------------------------
# 400: malformed input
# ---------------------------

class ValidationError(ApiError):
    status_code = 400
    default_message = "Validation failed"

    def __init__(self, message: Optional[str] = None, details: Any = None, field: Optional[str] = None):
        super().__init__(message, details)
        self.field = field


class MissingFieldsError(ValidationError):
    default_message = "Missing required fields"

    def __init__(self, fields):
        self.fields = list(fields)
        super().__init__(
            f"Missing required fields: {', '.join(self.fields)}",
            details={"fields": self.fields},
        )


class NoEventSelectedError(ValidationError):
    default_message = "Select at least one event!"

    def __init__(self):
        super().__init__(field="selectedEvents")


class InvalidEmailError(ValidationError):
    def __init__(self, value: str):
        super().__init__(f"{value} is not a valid email!", field="email")


class InvalidContactError(ValidationError):
    def __init__(self, value: str):
        super().__init__(f"{value} is not a valid Indian number!", field="contact")


class InvalidPaymentMethodError(ValidationError):
    default_message = "Invalid payment method"

    def __init__(self, value: Any = None):
        super().__init__(details={"allowed": ["cash", "online", None], "received": value}, field="paymentMethod")


class FileError(ApiError):
    status_code = 400
    default_message = "Invalid upload"


class InvalidFileTypeError(FileError):
    default_message = "Only JPEG/PNG images allowed"


class FileTooLargeError(FileError):
    default_message = "File too large"


# ---------------------------
# 401 / 404 / 409 / 500
# ---------------------------

class UnauthorizedError(ApiError):
    status_code = 401
    default_message = "Unauthorized: Invalid admin token"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Registration not found"


class DuplicateEmailError(ApiError):
    status_code = 409
    default_message = "Email already registered"


class InternalError(ApiError):
    status_code = 500


def register_error_handlers(app: Flask) -> None:
    """Render every failure as a JSON body: {error, details?}."""

    @app.errorhandler(ApiError)
    def _api_error(e: ApiError):
        if e.status_code >= 500:
            app.logger.error("%s: %s", type(e).__name__, e.message, exc_info=e.__cause__ or e)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        app.logger.exception("Server Error: %s", e)
        return jsonify({"error": "Internal server error"}), 500
