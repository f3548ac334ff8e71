"""Fan-out of a batch request into transient ProductUnit records."""
from typing import List, Optional

from app.exceptions import InvalidQuantityError
from app.models import ProductUnit, UnitStatus
from app.services.identifier_service import generate_serial_key, generate_qr_token

DEFAULT_PUBLIC_BASE_URL = 'https://warranty.com'
DEFAULT_MAX_QUANTITY = 100000


def build_qr_code_url(qr_token: str, base_url: str = DEFAULT_PUBLIC_BASE_URL) -> str:
    """URL of the PNG rendering of a unit's QR code."""
    return f"{base_url.rstrip('/')}/api/units/{qr_token}/qr.png"


def validate_quantity(quantity, max_quantity: int = DEFAULT_MAX_QUANTITY) -> int:
    """Return quantity as int or raise InvalidQuantityError."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(quantity)
    if quantity <= 0:
        raise InvalidQuantityError(quantity)
    if max_quantity is not None and quantity > max_quantity:
        raise InvalidQuantityError(quantity, max_quantity)
    return quantity


def new_unit(product_id, batch_id, base_url: str = DEFAULT_PUBLIC_BASE_URL) -> ProductUnit:
    """One unsaved unit with freshly generated identifiers."""
    qr_token = generate_qr_token()
    return ProductUnit(
        product_id=product_id,
        batch_id=batch_id,
        serial_key=generate_serial_key(),
        qr_token=qr_token,
        qr_code_url=build_qr_code_url(qr_token, base_url),
        status=UnitStatus.CREATED.value,
    )


def regenerate_identifiers(unit: ProductUnit, base_url: str = DEFAULT_PUBLIC_BASE_URL) -> ProductUnit:
    """Give a unit new identifiers after a unique-constraint collision."""
    unit.serial_key = generate_serial_key()
    unit.qr_token = generate_qr_token()
    unit.qr_code_url = build_qr_code_url(unit.qr_token, base_url)
    return unit


def create_units(
    product_id,
    batch_id,
    quantity: int,
    base_url: str = DEFAULT_PUBLIC_BASE_URL,
    max_quantity: Optional[int] = DEFAULT_MAX_QUANTITY
) -> List[ProductUnit]:
    """
    Build exactly `quantity` units for a batch.

    The units are not added to any session; persisting them (and retrying
    identifier collisions) is the caller's job.

    Raises:
        InvalidQuantityError: quantity is not an integer in 1..max_quantity
    """
    validate_quantity(quantity, max_quantity)
    return [new_unit(product_id, batch_id, base_url) for _ in range(quantity)]
