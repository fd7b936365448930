from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateSubmissionError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateSubmissionError, 409),
    (InvalidStateError, 400),
    (ValidationError, 400),
]


def json_body() -> dict:
    """Request JSON as a dict; a missing body is an empty dict, any other shape is rejected."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def status_for(exc: DomainError) -> int:
    for klass, code in _STATUS_BY_ERROR:
        if isinstance(exc, klass):
            return code
    return 400


def json_errors(view):
    """Translate domain errors into JSON responses.

    Anything that is not a DomainError becomes a generic 500; details stay in the log.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return jsonify({"success": False, "message": str(e)}), status_for(e)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return jsonify({"success": False, "message": "Internal server error"}), 500

    return wrapper
