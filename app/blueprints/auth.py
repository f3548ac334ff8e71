"""
Authentication blueprint.
Handles login, logout and the current-user lookup.
"""

from flask import Blueprint, session, g, jsonify
from app.database import get_session
from app.middleware import require_login
from app.services.auth_service import authenticate
from app.utils.validators import read_body
import logging

logger = logging.getLogger(__name__)


auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Open a session for email/password credentials."""
    data = read_body(allow_form=True)
    user = authenticate(get_session(), data.get('email'), data.get('password'))

    session.clear()
    session['user_id'] = user.id
    session.permanent = True
    logger.info(f"User {user.email} logged in")

    return jsonify({'status': 'ok', 'user': user.to_dict()})


@auth_bp.route('/logout', methods=['POST'])
def logout():
    if g.get('user'):
        logger.info(f"User {g.user.email} logged out")
    session.clear()
    return jsonify({'status': 'ok'})


@auth_bp.route('/me')
@require_login
def me():
    return jsonify({'status': 'ok', 'user': g.user.to_dict()})
