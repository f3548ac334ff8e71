"""ProductBatch model - one manufacturing run of a product."""
import enum
from sqlalchemy import Column, BigInteger, String, Integer, Date, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId


class BatchStatus(str, enum.Enum):
    """Batch status, forward-moving only."""
    CREATED = 'created'
    PRINTED = 'printed'
    DISTRIBUTED = 'distributed'
    ACTIVATED = 'activated'


class ProductBatch(Base):
    """
    Manufacturing batch.

    Units are generated against a batch up to its declared quantity; the
    status moves created -> printed -> distributed -> activated and never back.
    """

    __tablename__ = 'product_batch'
    __table_args__ = (
        CheckConstraint('quantity >= 1', name='ck_product_batch_quantity_positive'),
    )

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    product_id = Column(BigInteger, ForeignKey('product.id'), nullable=False, index=True)
    batch_number = Column(String(100), nullable=False, unique=True)
    quantity = Column(Integer, nullable=False)
    manufacturing_date = Column(Date, nullable=False, index=True)
    expiry_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default=BatchStatus.CREATED.value, index=True)
    created_by = Column(BigInteger, ForeignKey('app_user.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    product = relationship('Product', back_populates='batches')
    units = relationship('ProductUnit', back_populates='batch', lazy='dynamic')

    def __repr__(self):
        return f"<ProductBatch(id={self.id}, number='{self.batch_number}', status='{self.status}')>"

    def to_dict(self, include_product=False):
        data = {
            'id': self.id,
            'product_id': self.product_id,
            'batch_number': self.batch_number,
            'quantity': self.quantity,
            'manufacturing_date': self.manufacturing_date.isoformat() if self.manufacturing_date else None,
            'expiry_date': self.expiry_date.isoformat() if self.expiry_date else None,
            'status': self.status,
            'created_by': self.created_by,
        }
        if include_product:
            data['product'] = self.product.to_dict() if self.product else None
        return data
