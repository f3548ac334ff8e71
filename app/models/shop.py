"""Shop model."""
import enum
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId


class ShopStatus(str, enum.Enum):
    """Shop status enum."""
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    SUSPENDED = 'suspended'


class Shop(Base):
    """Retail shop that sells and activates products."""

    __tablename__ = 'shop'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    owner_name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, default=ShopStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    users = relationship('AppUser', back_populates='shop', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Shop(id={self.id}, name='{self.name}', status='{self.status}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'phone': self.phone,
            'email': self.email,
            'owner_name': self.owner_name,
            'status': self.status,
        }
