"""Decorators for route protection based on the stored session."""

from __future__ import annotations

from functools import wraps
from http import HTTPStatus

from flask import jsonify

from comandas_shared.constants import Roles
from comandas_shared.serializers import error_response
from comandas_web.utils.context import get_services


def login_required(f):
    """Decorator to require a stored token and profile for a route."""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_services().auth.is_authenticated():
            return jsonify(error_response("Autenticacion requerida")), HTTPStatus.UNAUTHORIZED
        return f(*args, **kwargs)

    return decorated_function


def role_required(required_roles):
    """
    Decorator factory to require specific role(s) for a route.

    Args:
        required_roles: Can be a single role or a list of roles
    """
    if isinstance(required_roles, (str, Roles)):
        required_roles = [required_roles]
    allowed = {Roles.parse(role.value if isinstance(role, Roles) else role) for role in required_roles}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            services = get_services()
            if not services.auth.is_authenticated():
                return jsonify(error_response("Autenticacion requerida")), HTTPStatus.UNAUTHORIZED

            role = services.auth.current_role()
            if role not in allowed:
                roles_str = ", ".join(sorted(r.value for r in allowed if r is not None))
                return jsonify(
                    error_response(f"Se requiere uno de estos roles: {roles_str}")
                ), HTTPStatus.FORBIDDEN

            return f(*args, **kwargs)

        return decorated_function

    return decorator
