from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, PolicyViolation, ValidationError
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def error_response(status: int, error: str, message: str):
    return jsonify({"success": False, "error": error, "message": message}), status


def ok(**payload):
    return jsonify({"success": True, **payload})


def current_user_id() -> int:
    return int(session["user_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(401, "unauthenticated", "Please log in to continue")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return error_response(401, "unauthenticated", "Please log in to continue")
            if session.get("role") not in allowed:
                return error_response(403, "forbidden", "You don't have permission to access this page")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def required_field(data: dict, name: str) -> str:
    value = data.get(name)
    if value is None or str(value).strip() == "":
        raise ValidationError(f"Missing field: {name}")
    return str(value).strip()


def date_arg(name: str, default=None):
    raw = request.args.get(name)
    if not raw:
        if default is None:
            raise ValidationError(f"Missing query parameter: {name}")
        return default
    return parse_iso_date(raw)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        logger.warning("Rejected %s %s: %s", request.method, request.path, e)
        return error_response(400, "invalid_input", str(e))

    @app.errorhandler(PolicyViolation)
    def handle_policy(e: PolicyViolation):
        logger.warning("Rejected %s %s: %s (%s)", request.method, request.path, e.code.value, e)
        return error_response(422, e.code.value, str(e))

    @app.errorhandler(AuthorizationError)
    def handle_forbidden(e: AuthorizationError):
        logger.warning("Forbidden %s %s for user %s", request.method, request.path, session.get("user_id"))
        return error_response(403, "forbidden", str(e))

    @app.errorhandler(NotFoundError)
    def handle_not_found(e: NotFoundError):
        return error_response(404, "not_found", str(e))

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Let Flask render its own HTTP errors (404 for unknown routes, 405, ...)
        code = getattr(e, "code", None)
        if isinstance(code, int) and 400 <= code < 600:
            return error_response(code, "http_error", getattr(e, "description", str(e)))
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return error_response(500, "internal_error", "Internal server error")
