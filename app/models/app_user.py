"""AppUser model - platform users with email/password authentication."""
import enum
from sqlalchemy import Column, BigInteger, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from app.database import Base, BigIntId


class UserRole(str, enum.Enum):
    """Platform roles."""
    ADMIN = 'admin'
    SHOP_OWNER = 'shop_owner'
    INVENTORY_USER = 'inventory_user'
    MIDDLEMAN = 'middleman'


# Roles that operate on behalf of a shop and therefore need one
SHOP_BOUND_ROLES = (UserRole.SHOP_OWNER.value, UserRole.INVENTORY_USER.value)


class AppUser(Base):
    """AppUser model - admins, shop staff and middlemen."""

    __tablename__ = 'app_user'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.INVENTORY_USER.value)
    shop_id = Column(BigInteger, ForeignKey('shop.id', ondelete='CASCADE'), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    shop = relationship('Shop', back_populates='users')

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def has_role(self, *roles):
        return self.role in roles

    def __repr__(self):
        return f"<AppUser(id={self.id}, email='{self.email}', role='{self.role}')>"

    def to_dict(self):
        """Convert to dictionary for JSON serialization (never exposes the hash)."""
        return {
            'id': self.id,
            'email': self.email,
            'full_name': self.full_name,
            'role': self.role,
            'shop_id': self.shop_id,
            'active': self.active,
        }
