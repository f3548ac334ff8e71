"""Product model."""
from sqlalchemy import Column, BigInteger, String, Text, Boolean, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId


MIN_WARRANTY_MONTHS = 1
MAX_WARRANTY_MONTHS = 120


class Product(Base):
    """Catalog entry. Soft-deleted through the active flag."""

    __tablename__ = 'product'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default='')
    category = Column(String(100), nullable=False, index=True)
    brand = Column(String(100), nullable=False, index=True)
    model = Column(String(100), nullable=False)
    warranty_duration_months = Column(Integer, nullable=False)
    image_url = Column(String(500), nullable=True)
    specifications = Column(JSON, nullable=False, default=dict)
    active = Column(Boolean, nullable=False, default=True, index=True)
    created_by = Column(BigInteger, ForeignKey('app_user.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    batches = relationship('ProductBatch', back_populates='product')

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', model='{self.model}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'brand': self.brand,
            'model': self.model,
            'warranty_duration_months': self.warranty_duration_months,
            'image_url': self.image_url,
            'specifications': dict(self.specifications or {}),
            'active': self.active,
        }
