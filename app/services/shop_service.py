"""Shop service - shops and their owner accounts."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import BusinessLogicError, NotFoundError
from app.models import Shop, ShopStatus, AppUser, UserRole
from app.utils.pagination import paginate
from app.utils.validators import is_valid_email, clean_text

logger = logging.getLogger(__name__)

SHOP_STATUSES = [s.value for s in ShopStatus]


def _email_taken(session: Session, email: str) -> bool:
    shop = session.query(Shop).filter(func.lower(Shop.email) == email).first()
    user = session.query(AppUser).filter(func.lower(AppUser.email) == email).first()
    return bool(shop or user)


def list_shops(
    session: Session,
    search: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[Shop], Dict[str, Any]]:
    query = session.query(Shop)
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Shop.name.ilike(pattern),
            Shop.owner_name.ilike(pattern),
            Shop.email.ilike(pattern),
            Shop.address.ilike(pattern),
        ))
    if status:
        query = query.filter(Shop.status == status)
    query = query.order_by(Shop.created_at.desc(), Shop.id.desc())
    return paginate(query, page, limit)


def get_shop(session: Session, shop_id: int) -> Shop:
    shop = session.query(Shop).filter(Shop.id == shop_id).first()
    if not shop:
        raise NotFoundError(f'Shop {shop_id} not found')
    return shop


def get_shop_owner(session: Session, shop_id: int) -> Optional[AppUser]:
    return session.query(AppUser).filter(
        AppUser.shop_id == shop_id,
        AppUser.role == UserRole.SHOP_OWNER.value
    ).first()


def create_shop_with_owner(session: Session, data: Dict[str, Any]) -> Tuple[Shop, AppUser]:
    """
    Create a shop and its shop_owner account in one transaction.

    The address is assembled from address/city/state/zip_code/country.
    """
    email = clean_text(data.get('owner_email'), 'owner_email').lower()
    owner_name = clean_text(data.get('owner_name'), 'owner_name')
    password = data.get('owner_password')
    shop_name = clean_text(data.get('shop_name'), 'shop_name')
    phone = clean_text(data.get('phone'), 'phone')

    errors = []
    if not shop_name:
        errors.append('Shop name is required.')
    if not owner_name:
        errors.append('Owner name is required.')
    if not is_valid_email(email):
        errors.append('A valid owner email is required.')
    if not isinstance(password, str) or len(password) < 6:
        errors.append('Password must be at least 6 characters.')
    if not phone:
        errors.append('Phone is required.')
    if errors:
        raise BusinessLogicError(' '.join(errors))

    address_parts = [clean_text(data.get(k), k) for k in ('address', 'city', 'state', 'zip_code', 'country')]
    address = ', '.join(part for part in address_parts if part)

    try:
        if _email_taken(session, email):
            raise BusinessLogicError('A shop or user with this email already exists')

        shop = Shop(
            name=shop_name,
            address=address,
            phone=phone,
            email=email,
            owner_name=owner_name,
            status=ShopStatus.ACTIVE.value
        )
        session.add(shop)
        session.flush()

        owner = AppUser(
            email=email,
            full_name=owner_name,
            role=UserRole.SHOP_OWNER.value,
            shop_id=shop.id,
            active=True
        )
        owner.set_password(password)
        session.add(owner)
        session.commit()
        logger.info(f"Shop {shop.id} '{shop.name}' created with owner {owner.email}")
        return shop, owner
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError('A shop or user with this email already exists')
    except BusinessLogicError:
        session.rollback()
        raise


def update_shop(session: Session, shop_id: int, data: Dict[str, Any]) -> Shop:
    try:
        shop = get_shop(session, shop_id)
        for field in ('name', 'address', 'phone', 'owner_name'):
            if field in data and data[field] is not None:
                value = clean_text(data[field], field)
                if not value:
                    raise BusinessLogicError(f'{field} cannot be empty')
                setattr(shop, field, value)
        if 'status' in data:
            if data['status'] not in SHOP_STATUSES:
                raise BusinessLogicError(f"Invalid status '{data['status']}'")
            shop.status = data['status']
        session.commit()
        return shop
    except (BusinessLogicError, NotFoundError):
        session.rollback()
        raise


def delete_shop(session: Session, shop_id: int) -> None:
    """Delete a shop together with its user accounts."""
    try:
        shop = get_shop(session, shop_id)
        session.delete(shop)
        session.commit()
        logger.info(f"Shop {shop_id} deleted")
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'Shop {shop_id} still has records linked to its accounts')
    except NotFoundError:
        session.rollback()
        raise
