"""
Analytics service.
Provides aggregated counts for the admin dashboard.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func

from app.models import Product, ProductUnit, WarrantyClaim, UnitStatus, OPEN_CLAIM_STATUSES
from app.utils.dates import utcnow


def get_analytics(session, expiring_days: int = 30, now: Optional[datetime] = None) -> dict:
    """
    Get dashboard counters.

    Returns:
        dict with keys:
            - total_products: active products
            - total_units
            - activated_units: units currently in status 'activated'
            - activation_rate: rounded percentage of activated units
            - warranty_expiring_soon: activated units expiring within expiring_days
            - active_claims: claims pending or in progress
            - recent_activations: 10 most recent activations (ProductUnit objects)
    """
    now = now or utcnow()

    total_products = session.query(func.count(Product.id)).filter(Product.active.is_(True)).scalar() or 0
    total_units = session.query(func.count(ProductUnit.id)).scalar() or 0
    activated_units = session.query(func.count(ProductUnit.id)).filter(
        ProductUnit.status == UnitStatus.ACTIVATED.value
    ).scalar() or 0
    active_claims = session.query(func.count(WarrantyClaim.id)).filter(
        WarrantyClaim.status.in_(OPEN_CLAIM_STATUSES)
    ).scalar() or 0

    warranty_expiring_soon = session.query(func.count(ProductUnit.id)).filter(
        ProductUnit.status == UnitStatus.ACTIVATED.value,
        ProductUnit.warranty_expires_at >= now,
        ProductUnit.warranty_expires_at <= now + timedelta(days=expiring_days)
    ).scalar() or 0

    recent_activations = session.query(ProductUnit).filter(
        ProductUnit.activated_at.isnot(None)
    ).order_by(ProductUnit.activated_at.desc()).limit(10).all()

    activation_rate = round(activated_units / total_units * 100) if total_units else 0

    return {
        'total_products': total_products,
        'total_units': total_units,
        'activated_units': activated_units,
        'activation_rate': activation_rate,
        'warranty_expiring_soon': warranty_expiring_soon,
        'active_claims': active_claims,
        'recent_activations': recent_activations,
    }
