"""Middleware for authentication and role checks."""
from functools import wraps
from flask import session, g, jsonify
from app.database import get_session
from app.models import AppUser


def load_current_user():
    """
    Load the current user into g (Flask's per-request global).

    Called before each request. Sets g.user and g.user_role when the
    session carries the id of an active user.
    """
    g.user = None
    g.user_role = None

    user_id = session.get('user_id')
    if not user_id:
        return

    db_session = get_session()
    user = db_session.query(AppUser).filter_by(id=user_id, active=True).first()
    if user:
        g.user = user
        g.user_role = user.role
    else:
        # Stale session (user deleted or disabled)
        session.pop('user_id', None)


def require_login(f):
    """
    Decorator: Require user to be logged in.

    Returns a 401 JSON error when the request is anonymous.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('user') is None:
            return jsonify({'status': 'error', 'message': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.

    Usage:
        @require_role('admin')
        @require_role('admin', 'shop_owner')
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if g.get('user') is None:
                return jsonify({'status': 'error', 'message': 'Authentication required'}), 401

            if g.get('user_role') not in allowed_roles:
                return jsonify({'status': 'error', 'message': 'You do not have permission for this action'}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator
