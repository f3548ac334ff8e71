"""
Warranty activation - the public, token-authenticated mutation.

Activation is a compare-and-set: the unit row is only updated while its
activated_at is still NULL, so concurrent scans of the same code produce
exactly one activation.
"""
import logging
import math
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.exceptions import BusinessLogicError, UnitNotFoundError, AlreadyActivatedError
from app.models import Product, ProductBatch, ProductUnit, Shop, UnitStatus
from app.services.batch_service import mark_batch_activated
from app.utils.dates import add_months, utcnow
from app.utils.validators import is_valid_email, clean_text

logger = logging.getLogger(__name__)


def get_unit_by_token(session: Session, qr_token: str) -> ProductUnit:
    """Look a unit up by QR token or raise UnitNotFoundError."""
    unit = session.query(ProductUnit).filter(ProductUnit.qr_token == qr_token).first()
    if not unit:
        raise UnitNotFoundError(qr_token)
    return unit


def compute_warranty_expiry(activated_at: datetime, warranty_duration_months: int) -> datetime:
    """Calendar-month expiry: activated 2024-01-20 with 12 months -> 2025-01-20."""
    return add_months(activated_at, warranty_duration_months)


def warranty_status(unit: ProductUnit, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Warranty state as shown on the public product page."""
    now = now or utcnow()
    if not unit.activated_at or not unit.warranty_expires_at:
        return {'state': 'not_activated', 'active': False, 'days_remaining': 0}
    if now < unit.warranty_expires_at:
        days = math.ceil((unit.warranty_expires_at - now).total_seconds() / 86400)
        return {'state': 'active', 'active': True, 'days_remaining': days}
    return {'state': 'expired', 'active': False, 'days_remaining': 0}


def _clean_customer(customer_info: Dict[str, Any]) -> Dict[str, Any]:
    name = clean_text(customer_info.get('name'), 'name')
    email = clean_text(customer_info.get('email'), 'email').lower()
    if not name:
        raise BusinessLogicError('Customer name is required')
    if not email:
        raise BusinessLogicError('Customer email is required')
    if not is_valid_email(email):
        raise BusinessLogicError('Customer email is not valid')
    return {
        'customer_name': name,
        'customer_email': email,
        'customer_phone': clean_text(customer_info.get('phone'), 'phone') or None,
        'shop_id': customer_info.get('shop_id') or None,
        'activated_by': customer_info.get('activated_by') or None,
    }


def activate_unit(
    session: Session,
    qr_token: str,
    customer_info: Dict[str, Any],
    now: Optional[datetime] = None
) -> ProductUnit:
    """
    Bind a unit to a customer and start its warranty clock.

    Runs in two transactions. The first reads the unit, product and shop and
    computes the expiry; it is closed before writing. The second opens with
    the conditional UPDATE, so the write lock is the first lock it takes and
    a concurrent activation waits for it instead of failing on a lock upgrade.

    Args:
        session: Database session
        qr_token: token from the scanned URL (the only credential)
        customer_info: name, email, optional phone / shop_id / activated_by
        now: activation time (naive UTC), defaults to the current time

    Returns:
        The refreshed unit.

    Raises:
        UnitNotFoundError: no unit has this token
        AlreadyActivatedError: the unit was activated before (data untouched)
    """
    customer = _clean_customer(customer_info)

    try:
        unit = get_unit_by_token(session, qr_token)
        serial_key, batch_id = unit.serial_key, unit.batch_id
        if unit.activated_at is not None:
            raise AlreadyActivatedError(serial_key)
        if customer['shop_id'] and session.get(Shop, customer['shop_id']) is None:
            raise BusinessLogicError(f"Shop {customer['shop_id']} does not exist")

        product = session.get(Product, unit.product_id)
        activated_at = now or utcnow()
        expires_at = compute_warranty_expiry(activated_at, product.warranty_duration_months)
        session.commit()
    except Exception:
        session.rollback()
        raise

    try:
        result = session.execute(
            update(ProductUnit)
            .where(ProductUnit.qr_token == qr_token, ProductUnit.activated_at.is_(None))
            .values(
                status=UnitStatus.ACTIVATED.value,
                activated_at=activated_at,
                warranty_expires_at=expires_at,
                **customer
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # Someone else activated it after our read
            raise AlreadyActivatedError(serial_key)

        batch = session.get(ProductBatch, batch_id)
        if batch and mark_batch_activated(batch):
            logger.info(f"Batch {batch.batch_number} rolled up to activated")

        session.commit()
    except Exception:
        session.rollback()
        raise

    session.refresh(unit)
    logger.info(f"Unit {unit.serial_key} activated, warranty until {unit.warranty_expires_at:%Y-%m-%d}")
    return unit
