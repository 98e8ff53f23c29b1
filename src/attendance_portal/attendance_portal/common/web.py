from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..users.service import SessionUser

logger = logging.getLogger(__name__)

_STATUS_FOR_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidStateError, 409),
)


def current_user() -> SessionUser:
    return SessionUser(username=session["username"], role=Role(session["role"]))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "username" not in session:
            raise AuthenticationError("Please log in to continue")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if session.get("role") not in allowed:
                raise AuthorizationError("You do not have permission for this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for error_type, status in _STATUS_FOR_ERROR:
            if isinstance(e, error_type):
                return jsonify({"error": str(e)}), status
        logger.error("Unhandled domain error: %s", e)
        return jsonify({"error": str(e)}), 500
