"""Decorators for route protection using bearer tokens."""

from __future__ import annotations

from functools import wraps

from flask import g, request

from bistro_api.extensions import get_services
from bistro_shared.constants import Access
from bistro_shared.models import User


def require_access(access: Access):
    """
    Declare who may call a view.

    The resolved user (or None for anonymous callers of open endpoints) is
    stored on ``g.current_user``. Failures raise ``Unauthenticated`` or
    ``Forbidden`` and are rendered by the error handlers.
    """

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            auth = get_services().auth
            g.current_user = auth.check_access(access, request.headers.get("Authorization"))
            return f(*args, **kwargs)

        decorated_function.access = access
        return decorated_function

    return decorator


def public(f):
    return require_access(Access.PUBLIC)(f)


def login_required(f):
    """Any active user with a valid token."""
    return require_access(Access.AUTHENTICATED)(f)


def staff_required(f):
    """Kitchen and waiter screens; open unless staff auth is switched on."""
    return require_access(Access.STAFF)(f)


def admin_required(f):
    return require_access(Access.ADMIN)(f)


def get_current_user() -> User | None:
    return g.get("current_user")
