"""Request guards and error responses for the HTTP API."""

from __future__ import annotations

import functools
import logging
import uuid

from flask import g, jsonify, request

from .errors import AppError

ROLE_EMPLOYEE = "employee"
ROLE_INVESTOR = "investor"

_ROLE_HEADERS = {
    ROLE_EMPLOYEE: ("x-employee-id", "employee_id"),
    ROLE_INVESTOR: ("x-investor-id", "investor_id"),
}

log = logging.getLogger(__name__)


def _forbidden(message):
    return jsonify({"message": message}), 403


def require_role(*roles):
    """Decorate a view so it runs only for a caller identifying as one of *roles*.

    The roles are tried in order; the first whose header is present decides.
    Its identifier is stored on ``flask.g`` as ``employee_id`` or
    ``investor_id``. A malformed or missing header gives a 403 response.
    """

    def decorator(view):
        @functools.wraps(view)
        def wrapper(*args, **kwargs):
            for role in roles:
                entry = _ROLE_HEADERS.get(role)
                if entry is None:
                    continue
                header, attribute = entry
                value = request.headers.get(header, "")
                if not value:
                    continue
                try:
                    user_id = uuid.UUID(value)
                except ValueError:
                    return _forbidden(f"invalid {header} header")
                setattr(g, attribute, user_id)
                return view(*args, **kwargs)
            return _forbidden("missing required role header")

        return wrapper

    return decorator


def error_body(error):
    """Return the JSON body and HTTP status for *error*."""
    if isinstance(error, AppError):
        body = {"message": str(error)}
        if error.errors:
            body["errors"] = list(error.errors)
        return body, error.status_code
    return {"message": "An unexpected error occurred"}, 500


def _is_http_exception(error):
    """Tell whether *error* is one of the framework's own HTTP responses (404, 405, ...)."""
    return isinstance(getattr(error, "code", None), int) and callable(
        getattr(error, "get_response", None)
    )


def register_error_handlers(app):
    """Turn exceptions raised by views of *app* into JSON error responses."""

    def handle(error):
        if _is_http_exception(error):
            return error
        if not isinstance(error, AppError):
            log.exception("unhandled error", exc_info=error)
        body, status = error_body(error)
        return jsonify(body), status

    app.register_error_handler(Exception, handle)
    return app