"""
Authentication service for user management.

Handles credential checks and user creation.
"""
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from app.models import AppUser, UserRole, SHOP_BOUND_ROLES
from app.exceptions import BusinessLogicError, UnauthorizedError
from app.utils.validators import is_valid_email, clean_text
import logging

logger = logging.getLogger(__name__)

ROLES = [r.value for r in UserRole]


def authenticate(session, email, password):
    """
    Return the active user matching email/password.

    Raises:
        UnauthorizedError: unknown email, wrong password or inactive account (401)
    """
    email = clean_text(email, 'email').lower()
    user = session.query(AppUser).filter(func.lower(AppUser.email) == email).first()

    if not user or not user.check_password(password if isinstance(password, str) else ''):
        logger.warning(f"Failed login attempt for {email}")
        raise UnauthorizedError('Invalid email or password', status_code=401)

    if not user.active:
        logger.warning(f"Login attempt on inactive account {email}")
        raise UnauthorizedError('This account is disabled', status_code=401)

    return user


def create_user(session, email, password, full_name, role=UserRole.INVENTORY_USER.value, shop_id=None):
    """
    Create a platform user.

    shop_owner and inventory_user accounts must belong to a shop.
    """
    email = clean_text(email, 'email').lower()
    if not is_valid_email(email):
        raise BusinessLogicError('Invalid email address')
    if role not in ROLES:
        raise BusinessLogicError(f"Invalid role '{role}'")
    if role in SHOP_BOUND_ROLES and not shop_id:
        raise BusinessLogicError(f'Role {role} requires a shop')
    if not isinstance(password, str) or len(password) < 6:
        raise BusinessLogicError('Password must be at least 6 characters.')

    try:
        user = AppUser(email=email, full_name=clean_text(full_name, 'full_name'), role=role, shop_id=shop_id, active=True)
        user.set_password(password)
        session.add(user)
        session.commit()
        logger.info(f"User {email} created with role {role}")
        return user
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('A user with this email already exists')
