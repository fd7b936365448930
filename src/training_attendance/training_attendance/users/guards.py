from __future__ import annotations

from functools import wraps

from flask import g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import Caller
from .tokens import TokenService


def build_guards(tokens: TokenService):
    """Return (login_required, admin_required) decorators bound to a token service.

    A valid ``Authorization: Bearer <token>`` header puts the Caller on ``flask.g.caller``.
    """

    def _authenticate():
        header = request.headers.get("Authorization", "")
        parts = header.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
            return jsonify({"success": False, "message": "Token is missing"}), 401
        try:
            g.caller = tokens.decode(parts[1].strip())
        except AuthenticationError as e:
            return jsonify({"success": False, "message": str(e)}), 401
        return None

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            failure = _authenticate()
            if failure:
                return failure
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            failure = _authenticate()
            if failure:
                return failure
            if g.caller.role != Role.ADMIN:
                return jsonify({"success": False, "message": "Admin access required"}), 403
            return view(*args, **kwargs)

        return wrapper

    return login_required, admin_required


def current_caller() -> Caller:
    return g.caller
