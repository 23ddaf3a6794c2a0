# Overview: Request and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import auth_service, person_service


def _is_authenticated() -> bool:
    return hasattr(g, "current_person") and hasattr(g, "roles")


def require_auth(f):
    """
    Require a bearer token and a registered person behind it.

    Sets the following Flask g attributes:
    - g.current_person: The Person matching the token's user_login
    - g.roles: frozenset of role names granted by the identity provider

    SECURITY: Returns 401 if:
    - No Authorization header
    - Unknown token
    - No active person registered under the token's login
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()
        identity = auth_service.resolve_token(token)
        if identity is None:
            return jsonify({"error": "Invalid token"}), 401

        person = person_service.find_by_login(identity.user_login)
        if person is None:
            return jsonify({"error": "Unknown person"}), 401

        g.current_person = person
        g.roles = identity.roles

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """Require any of the given roles. Use after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if not g.roles.intersection(roles):
                return jsonify({
                    "error": "Permission denied",
                    "required_roles": sorted(roles),
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
