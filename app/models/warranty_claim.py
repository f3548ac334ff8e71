"""WarrantyClaim model."""
import enum
from sqlalchemy import Column, BigInteger, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base, BigIntId


class ClaimStatus(str, enum.Enum):
    """Claim status enum."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'


class ClaimType(str, enum.Enum):
    """What the customer asks for."""
    REPAIR = 'repair'
    REPLACEMENT = 'replacement'
    REFUND = 'refund'


# Claims still waiting on someone
OPEN_CLAIM_STATUSES = (ClaimStatus.PENDING.value, ClaimStatus.IN_PROGRESS.value)


class WarrantyClaim(Base):
    """Warranty claim filed against one activated unit."""

    __tablename__ = 'warranty_claim'

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    product_unit_id = Column(BigInteger, ForeignKey('product_unit.id'), nullable=False, index=True)
    claim_type = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=ClaimStatus.PENDING.value, index=True)
    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_phone = Column(String(50), nullable=False)
    images = Column(JSON, nullable=False, default=list)
    resolution = Column(Text, nullable=True)
    assigned_to = Column(BigInteger, ForeignKey('app_user.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    unit = relationship('ProductUnit', back_populates='claims')

    def __repr__(self):
        return f"<WarrantyClaim(id={self.id}, unit={self.product_unit_id}, status='{self.status}')>"

    def to_dict(self):
        return {
            'id': self.id,
            'product_unit_id': self.product_unit_id,
            'claim_type': self.claim_type,
            'description': self.description,
            'status': self.status,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'images': list(self.images or []),
            'resolution': self.resolution,
            'assigned_to': self.assigned_to,
        }
