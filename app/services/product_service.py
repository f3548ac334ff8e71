"""Product catalog service."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.exceptions import BusinessLogicError, NotFoundError
from app.models import Product, MIN_WARRANTY_MONTHS, MAX_WARRANTY_MONTHS
from app.utils.pagination import paginate
from app.utils.validators import clean_text

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'category', 'brand', 'model')
EDITABLE_FIELDS = ('name', 'description', 'category', 'brand', 'model',
                   'warranty_duration_months', 'image_url', 'specifications')


def _validate_warranty_months(value) -> int:
    try:
        months = int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError('Warranty duration must be a whole number of months')
    if months < MIN_WARRANTY_MONTHS or months > MAX_WARRANTY_MONTHS:
        raise BusinessLogicError(
            f'Warranty duration must be between {MIN_WARRANTY_MONTHS} and {MAX_WARRANTY_MONTHS} months'
        )
    return months


def _validate_specifications(value) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise BusinessLogicError('Specifications must be a key/value object')
    return {str(k).strip(): str(v).strip() for k, v in value.items() if str(k).strip()}


def _clean(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    cleaned = {}
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == 'warranty_duration_months':
            cleaned[field] = _validate_warranty_months(value)
        elif field == 'specifications':
            cleaned[field] = _validate_specifications(value)
        elif value is None:
            cleaned[field] = None
        else:
            cleaned[field] = clean_text(value, field)

    missing = [f for f in REQUIRED_FIELDS if f in cleaned and not cleaned[f]]
    if not partial:
        missing += [f for f in REQUIRED_FIELDS if f not in cleaned]
        if 'warranty_duration_months' not in cleaned:
            missing.append('warranty_duration_months')
    if missing:
        raise BusinessLogicError(f"Missing required fields: {', '.join(sorted(set(missing)))}")
    return cleaned


def list_products(
    session: Session,
    search: Optional[str] = None,
    category: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[Product], Dict[str, Any]]:
    """Active products, newest first."""
    query = session.query(Product).filter(Product.active.is_(True))
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Product.name.ilike(pattern),
            Product.brand.ilike(pattern),
            Product.model.ilike(pattern),
            Product.category.ilike(pattern),
        ))
    if category:
        query = query.filter(Product.category == category)
    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(query, page, limit)


def get_product(session: Session, product_id: int, include_inactive: bool = False) -> Product:
    query = session.query(Product).filter(Product.id == product_id)
    if not include_inactive:
        query = query.filter(Product.active.is_(True))
    product = query.first()
    if not product:
        raise NotFoundError(f'Product {product_id} not found')
    return product


def create_product(session: Session, data: Dict[str, Any], created_by: Optional[int] = None) -> Product:
    cleaned = _clean(data)
    cleaned.setdefault('description', '')
    cleaned.setdefault('specifications', {})
    product = Product(created_by=created_by, active=True, **cleaned)
    session.add(product)
    session.commit()
    logger.info(f"Product {product.id} '{product.name}' created")
    return product


def update_product(session: Session, product_id: int, data: Dict[str, Any]) -> Product:
    try:
        product = get_product(session, product_id)
        for field, value in _clean(data, partial=True).items():
            setattr(product, field, value)
        session.commit()
        return product
    except (BusinessLogicError, NotFoundError):
        session.rollback()
        raise


def deactivate_product(session: Session, product_id: int) -> Product:
    """Soft delete: the product disappears from the catalog, its units keep working."""
    try:
        product = get_product(session, product_id)
        product.active = False
        session.commit()
        logger.info(f"Product {product.id} deactivated")
        return product
    except NotFoundError:
        session.rollback()
        raise
