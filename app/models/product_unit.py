"""ProductUnit model - one physical, individually identified item."""
import enum
from sqlalchemy import Column, BigInteger, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId


class UnitStatus(str, enum.Enum):
    """Unit status, forward-moving only."""
    CREATED = 'created'
    PRINTED = 'printed'
    DISTRIBUTED = 'distributed'
    ACTIVATED = 'activated'
    CLAIMED = 'claimed'


class ProductUnit(Base):
    """
    Product unit.

    serial_key is printed on the sticker; qr_token is embedded in the public
    activation URL and is the only credential for activation. activated_at and
    warranty_expires_at are written once, at activation.
    """

    __tablename__ = 'product_unit'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    product_id = Column(BigInteger, ForeignKey('product.id'), nullable=False, index=True)
    batch_id = Column(BigInteger, ForeignKey('product_batch.id'), nullable=False, index=True)
    serial_key = Column(String(12), nullable=False, unique=True)
    qr_token = Column(String(32), nullable=False, unique=True)
    qr_code_url = Column(String(500), nullable=False)
    status = Column(String(20), nullable=False, default=UnitStatus.CREATED.value, index=True)

    # Activation (set once)
    activated_at = Column(DateTime, nullable=True)
    activated_by = Column(BigInteger, ForeignKey('app_user.id'), nullable=True)
    warranty_expires_at = Column(DateTime, nullable=True, index=True)
    customer_name = Column(String(200), nullable=True)
    customer_email = Column(String(255), nullable=True, index=True)
    customer_phone = Column(String(50), nullable=True)
    shop_id = Column(BigInteger, ForeignKey('shop.id', ondelete='SET NULL'), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship('Product')
    batch = relationship('ProductBatch', back_populates='units')
    claims = relationship('WarrantyClaim', back_populates='unit', cascade='all, delete-orphan')

    @property
    def is_activated(self):
        return self.activated_at is not None

    def __repr__(self):
        return f"<ProductUnit(id={self.id}, serial='{self.serial_key}', status='{self.status}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'product_id': self.product_id,
            'batch_id': self.batch_id,
            'serial_key': self.serial_key,
            'qr_token': self.qr_token,
            'qr_code_url': self.qr_code_url,
            'status': self.status,
            'activated_at': self.activated_at.isoformat() if self.activated_at else None,
            'warranty_expires_at': self.warranty_expires_at.isoformat() if self.warranty_expires_at else None,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'shop_id': self.shop_id,
        }
