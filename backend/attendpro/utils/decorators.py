# backend/attendpro/utils/decorators.py
"""Custom decorators for authorization."""
from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt_identity
from attendpro import db
from attendpro.models.user import User
from attendpro.utils.helpers import error_response


def _load_current_user():
    try:
        user_id = int(get_jwt_identity())
    except (TypeError, ValueError):
        return None
    return db.session.get(User, user_id)


def active_user_required(f):
    """Decorator to require an existing, active account behind the token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()

        if not user:
            return error_response("Authentication required", 401)

        if not user.is_active:
            return error_response("Account is not active", 403)

        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require admin role."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = _load_current_user()

        if not user:
            return error_response("User not found", 404)

        if not user.is_active:
            return error_response("Account is not active", 403)

        if not user.is_admin():
            return error_response("Admin access required", 403)

        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function
