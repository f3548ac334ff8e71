"""
Batch lifecycle service.

Handles batch creation, unit generation up to the declared quantity, and the
forward-only status machine: created -> printed -> distributed -> activated
(printed -> activated is allowed as a reporting rollup).
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import (
    BusinessLogicError, NotFoundError, InvalidQuantityError,
    InvalidTransitionError, DuplicateIdentifierError
)
from app.models import Product, ProductBatch, ProductUnit, BatchStatus, UnitStatus
from app.services.unit_factory import (
    create_units, regenerate_identifiers, validate_quantity,
    DEFAULT_PUBLIC_BASE_URL, DEFAULT_MAX_QUANTITY
)
from app.utils.pagination import paginate
from app.utils.validators import clean_text

logger = logging.getLogger(__name__)


BATCH_TRANSITIONS = {
    BatchStatus.CREATED.value: (BatchStatus.PRINTED.value,),
    BatchStatus.PRINTED.value: (BatchStatus.DISTRIBUTED.value, BatchStatus.ACTIVATED.value),
    BatchStatus.DISTRIBUTED.value: (BatchStatus.ACTIVATED.value,),
    BatchStatus.ACTIVATED.value: (),
}

# Unit statuses a batch transition drags forward
_UNIT_CASCADE = {
    BatchStatus.PRINTED.value: (UnitStatus.CREATED.value,),
    BatchStatus.DISTRIBUTED.value: (UnitStatus.CREATED.value, UnitStatus.PRINTED.value),
}


def can_transition(current: str, target: str) -> bool:
    return target in BATCH_TRANSITIONS.get(current, ())


def transition_batch(batch: ProductBatch, target_status) -> ProductBatch:
    """
    Move a batch to target_status if it is an allowed successor.

    Same-state and backward requests fail too. Nothing is committed.

    Raises:
        InvalidTransitionError: target is not reachable from the current status
    """
    target = target_status.value if isinstance(target_status, BatchStatus) else str(target_status)
    if not can_transition(batch.status, target):
        raise InvalidTransitionError('batch', batch.status, target)
    batch.status = target
    return batch


def get_batch(session: Session, batch_id: int, for_update: bool = False) -> ProductBatch:
    query = session.query(ProductBatch).filter(ProductBatch.id == batch_id)
    if for_update:
        query = query.with_for_update()
    batch = query.first()
    if not batch:
        raise NotFoundError(f'Batch {batch_id} not found')
    return batch


def list_batches(
    session: Session,
    search: Optional[str] = None,
    status: Optional[str] = None,
    product_id: Optional[int] = None,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[ProductBatch], Dict[str, Any]]:
    """Batches, newest first, filtered by batch number / status / product."""
    query = session.query(ProductBatch)
    if search:
        query = query.filter(ProductBatch.batch_number.ilike(f'%{search}%'))
    if status:
        query = query.filter(ProductBatch.status == status)
    if product_id:
        query = query.filter(ProductBatch.product_id == product_id)
    query = query.order_by(ProductBatch.created_at.desc(), ProductBatch.id.desc())
    return paginate(query, page, limit)


def count_units(session: Session, batch_id: int) -> int:
    return session.query(func.count(ProductUnit.id)).filter(ProductUnit.batch_id == batch_id).scalar() or 0


def get_batch_units(session: Session, batch_id: int) -> List[ProductUnit]:
    """Units of a batch in generation order (the print order)."""
    return session.query(ProductUnit).filter(
        ProductUnit.batch_id == batch_id
    ).order_by(ProductUnit.id).all()


def list_units(
    session: Session,
    batch_id: Optional[int] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[ProductUnit], Dict[str, Any]]:
    query = session.query(ProductUnit)
    if batch_id:
        query = query.filter(ProductUnit.batch_id == batch_id)
    if status:
        query = query.filter(ProductUnit.status == status)
    if search:
        query = query.filter(ProductUnit.serial_key.ilike(f'%{search}%'))
    query = query.order_by(ProductUnit.id)
    return paginate(query, page, limit)


def create_batch(
    session: Session,
    product_id: int,
    batch_number: str,
    quantity: int,
    manufacturing_date: date,
    created_by: Optional[int] = None,
    expiry_date: Optional[date] = None,
    max_quantity: int = DEFAULT_MAX_QUANTITY
) -> ProductBatch:
    """Create a batch in status 'created'. Units are generated separately."""
    batch_number = clean_text(batch_number, 'batch_number')
    if not batch_number:
        raise BusinessLogicError('Batch number is required')
    validate_quantity(quantity, max_quantity)
    if not manufacturing_date:
        raise BusinessLogicError('Manufacturing date is required')
    if expiry_date and expiry_date < manufacturing_date:
        raise BusinessLogicError('Expiry date cannot be before the manufacturing date')

    try:
        product = session.query(Product).filter(Product.id == product_id, Product.active.is_(True)).first()
        if not product:
            raise NotFoundError(f'Product {product_id} not found')

        if session.query(ProductBatch).filter(ProductBatch.batch_number == batch_number).first():
            raise BusinessLogicError(f'Batch number {batch_number} already exists')

        batch = ProductBatch(
            product_id=product.id,
            batch_number=batch_number,
            quantity=quantity,
            manufacturing_date=manufacturing_date,
            expiry_date=expiry_date,
            status=BatchStatus.CREATED.value,
            created_by=created_by
        )
        session.add(batch)
        session.commit()
        logger.info(f"Batch {batch_number} created for product {product.id} ({quantity} units)")
        return batch
    except IntegrityError:
        # Lost a race on the unique batch_number
        session.rollback()
        raise BusinessLogicError(f'Batch number {batch_number} already exists')
    except (BusinessLogicError, NotFoundError):
        session.rollback()
        raise


def _insert_unit(session: Session, unit: ProductUnit, base_url: str, max_retries: int) -> ProductUnit:
    """Insert one unit in its own savepoint, regenerating identifiers on collision."""
    for attempt in range(1, max_retries + 1):
        try:
            with session.begin_nested():
                session.add(unit)
            return unit
        except IntegrityError:
            logger.warning(
                f"Identifier collision for batch {unit.batch_id} (attempt {attempt}/{max_retries}), regenerating"
            )
            regenerate_identifiers(unit, base_url)
    raise DuplicateIdentifierError(max_retries)


def _cascade_unit_status(session: Session, batch_id: int, target: str) -> int:
    """Move the batch's units that are behind `target` up to it."""
    behind = _UNIT_CASCADE.get(target)
    if not behind:
        return 0
    result = session.execute(
        update(ProductUnit)
        .where(ProductUnit.batch_id == batch_id, ProductUnit.status.in_(behind))
        .values(status=target)
        .execution_options(synchronize_session='fetch')
    )
    return result.rowcount


def generate_batch_units(
    session: Session,
    batch_id: int,
    count: Optional[int] = None,
    base_url: str = DEFAULT_PUBLIC_BASE_URL,
    max_retries: int = 5
) -> List[ProductUnit]:
    """
    Generate and persist units for a batch, never beyond its declared quantity.

    With count=None the batch is filled up. Once the realized unit count
    reaches the quantity, a 'created' batch moves to 'printed' together with
    its units.

    A unit whose identifiers keep colliding raises DuplicateIdentifierError;
    the units inserted before it are kept (reconcile with reconcile_batch).
    """
    batch = get_batch(session, batch_id, for_update=True)
    if batch.status not in (BatchStatus.CREATED.value, BatchStatus.PRINTED.value):
        session.rollback()
        raise BusinessLogicError(f'Cannot generate units for a batch in status {batch.status}')

    remaining = batch.quantity - count_units(session, batch.id)
    if remaining <= 0:
        session.rollback()
        raise BusinessLogicError(f'All {batch.quantity} units of batch {batch.batch_number} already exist')
    if count is None:
        count = remaining
    elif isinstance(count, int) and not isinstance(count, bool) and count > remaining:
        session.rollback()
        raise InvalidQuantityError(count, remaining)

    try:
        units = create_units(batch.product_id, batch.id, count, base_url, max_quantity=None)
    except InvalidQuantityError:
        session.rollback()
        raise

    inserted = []
    try:
        for unit in units:
            inserted.append(_insert_unit(session, unit, base_url, max_retries))
    except DuplicateIdentifierError:
        session.commit()
        logger.error(
            f"Batch {batch.batch_number}: stopped after {len(inserted)}/{count} units, identifiers kept colliding"
        )
        raise

    if count_units(session, batch.id) >= batch.quantity and batch.status == BatchStatus.CREATED.value:
        transition_batch(batch, BatchStatus.PRINTED)
        _cascade_unit_status(session, batch.id, BatchStatus.PRINTED.value)

    session.commit()
    logger.info(f"Batch {batch.batch_number}: generated {len(inserted)} units (status {batch.status})")
    return inserted


def change_batch_status(session: Session, batch_id: int, target_status: str) -> ProductBatch:
    """Operator-driven transition, e.g. printed -> distributed."""
    try:
        batch = get_batch(session, batch_id, for_update=True)
        if target_status == BatchStatus.PRINTED.value and count_units(session, batch.id) < batch.quantity:
            raise BusinessLogicError(
                f'Batch {batch.batch_number} cannot be printed before all {batch.quantity} units are generated'
            )
        previous = batch.status
        transition_batch(batch, target_status)
        moved = _cascade_unit_status(session, batch.id, batch.status)
        session.commit()
        logger.info(f"Batch {batch.batch_number}: {previous} -> {batch.status} ({moved} units moved)")
        return batch
    except (BusinessLogicError, NotFoundError):
        session.rollback()
        raise


def mark_batch_activated(batch: ProductBatch) -> bool:
    """Roll a printed/distributed batch up to 'activated'. Returns True if it moved."""
    if batch.status in (BatchStatus.PRINTED.value, BatchStatus.DISTRIBUTED.value):
        transition_batch(batch, BatchStatus.ACTIVATED)
        return True
    return False


def reconcile_batch(session: Session, batch_id: int) -> Dict[str, Any]:
    """Compare realized units against the declared quantity."""
    batch = get_batch(session, batch_id)
    rows = session.query(ProductUnit.status, func.count(ProductUnit.id)).filter(
        ProductUnit.batch_id == batch.id
    ).group_by(ProductUnit.status).all()
    by_status = {status.value: 0 for status in UnitStatus}
    for status, total in rows:
        by_status[status] = total
    realized = sum(by_status.values())
    return {
        'batch_id': batch.id,
        'batch_number': batch.batch_number,
        'status': batch.status,
        'declared': batch.quantity,
        'realized': realized,
        'missing': max(batch.quantity - realized, 0),
        'units_by_status': by_status,
    }
