"""Models package - exports all SQLAlchemy models."""
# Accounts
from app.models.shop import Shop, ShopStatus
from app.models.app_user import AppUser, UserRole, SHOP_BOUND_ROLES

# Catalog and units
from app.models.product import Product, MIN_WARRANTY_MONTHS, MAX_WARRANTY_MONTHS
from app.models.product_batch import ProductBatch, BatchStatus
from app.models.product_unit import ProductUnit, UnitStatus
from app.models.warranty_claim import WarrantyClaim, ClaimStatus, ClaimType, OPEN_CLAIM_STATUSES

__all__ = [
    # Accounts
    'Shop', 'ShopStatus', 'AppUser', 'UserRole', 'SHOP_BOUND_ROLES',
    # Catalog and units
    'Product', 'MIN_WARRANTY_MONTHS', 'MAX_WARRANTY_MONTHS',
    'ProductBatch', 'BatchStatus',
    'ProductUnit', 'UnitStatus',
    'WarrantyClaim', 'ClaimStatus', 'ClaimType', 'OPEN_CLAIM_STATUSES',
]
