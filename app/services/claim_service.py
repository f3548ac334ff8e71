"""Warranty claim service."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.exceptions import BusinessLogicError, NotFoundError, InvalidTransitionError, UnitNotFoundError
from app.models import WarrantyClaim, ClaimStatus, ClaimType, UnitStatus
from app.services.activation_service import get_unit_by_token, warranty_status
from app.utils.pagination import paginate
from app.utils.validators import clean_text

logger = logging.getLogger(__name__)


CLAIM_TRANSITIONS = {
    ClaimStatus.PENDING.value: (ClaimStatus.APPROVED.value, ClaimStatus.REJECTED.value),
    ClaimStatus.APPROVED.value: (ClaimStatus.IN_PROGRESS.value,),
    ClaimStatus.IN_PROGRESS.value: (ClaimStatus.COMPLETED.value,),
    ClaimStatus.REJECTED.value: (),
    ClaimStatus.COMPLETED.value: (),
}

CLAIM_TYPES = [t.value for t in ClaimType]


def file_claim(
    session: Session,
    qr_token: str,
    claim_type: str,
    description: str,
    customer: Dict[str, Any],
    images: Optional[List[str]] = None
) -> WarrantyClaim:
    """
    File a claim against an activated unit whose warranty is still running.

    The unit moves to 'claimed'; further claims on a claimed unit are allowed.
    """
    if claim_type not in CLAIM_TYPES:
        raise BusinessLogicError(f"Invalid claim type '{claim_type}'. Expected one of: {', '.join(CLAIM_TYPES)}")
    description = clean_text(description, 'description')
    if not description:
        raise BusinessLogicError('Claim description is required')
    name = clean_text(customer.get('name'), 'name')
    email = clean_text(customer.get('email'), 'email').lower()
    phone = clean_text(customer.get('phone'), 'phone')
    if not name or not email or not phone:
        raise BusinessLogicError('Customer name, email and phone are required')

    try:
        unit = get_unit_by_token(session, qr_token)
        if unit.activated_at is None:
            raise BusinessLogicError('The warranty for this product has not been activated')
        if not warranty_status(unit)['active']:
            raise BusinessLogicError('The warranty for this product has expired')

        claim = WarrantyClaim(
            product_unit_id=unit.id,
            claim_type=claim_type,
            description=description,
            status=ClaimStatus.PENDING.value,
            customer_name=name,
            customer_email=email,
            customer_phone=phone,
            images=list(images or []),
        )
        session.add(claim)
        unit.status = UnitStatus.CLAIMED.value
        session.commit()
        logger.info(f"Claim {claim.id} ({claim_type}) filed for unit {unit.serial_key}")
        return claim
    except (BusinessLogicError, UnitNotFoundError):
        session.rollback()
        raise


def get_claim(session: Session, claim_id: int) -> WarrantyClaim:
    claim = session.query(WarrantyClaim).filter(WarrantyClaim.id == claim_id).first()
    if not claim:
        raise NotFoundError(f'Claim {claim_id} not found')
    return claim


def update_claim_status(
    session: Session,
    claim_id: int,
    target_status: str,
    resolution: Optional[str] = None,
    assigned_to: Optional[int] = None
) -> WarrantyClaim:
    """Move a claim along pending -> approved/rejected, approved -> in_progress -> completed."""
    try:
        claim = get_claim(session, claim_id)
        if target_status not in CLAIM_TRANSITIONS.get(claim.status, ()):
            raise InvalidTransitionError('claim', claim.status, target_status)
        claim.status = target_status
        if resolution:
            claim.resolution = clean_text(resolution, 'resolution')
        if assigned_to:
            claim.assigned_to = assigned_to
        session.commit()
        logger.info(f"Claim {claim.id} -> {target_status}")
        return claim
    except (BusinessLogicError, NotFoundError):
        session.rollback()
        raise


def list_claims(
    session: Session,
    status: Optional[str] = None,
    unit_id: Optional[int] = None,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[WarrantyClaim], Dict[str, Any]]:
    query = session.query(WarrantyClaim)
    if status:
        query = query.filter(WarrantyClaim.status == status)
    if unit_id:
        query = query.filter(WarrantyClaim.product_unit_id == unit_id)
    query = query.order_by(WarrantyClaim.created_at.desc(), WarrantyClaim.id.desc())
    return paginate(query, page, limit)
