"""Sale model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from pos.database import Base
import enum


class SaleStatus(enum.Enum):
    """Sale status enum."""
    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class Sale(Base):
    """Sale (venta finalizada). Immutable once created; only deletion is allowed."""

    __tablename__ = 'sale'

    id = Column(Integer, primary_key=True, autoincrement=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    tax = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    customer_id = Column(Integer, ForeignKey('customer.id', ondelete='SET NULL'), nullable=True)
    payment_method = Column(String(30), nullable=False)
    status = Column(Enum(SaleStatus, name='sale_status'), nullable=False, default=SaleStatus.COMPLETED)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    # Relationships
    customer = relationship('Customer', back_populates='sales')
    items = relationship(
        'SaleItem',
        back_populates='sale',
        cascade='all, delete-orphan',
        order_by='SaleItem.position'
    )

    def __repr__(self):
        return f"<Sale(id={self.id}, total={self.total}, status={self.status.value})>"

    def to_dict(self):
        return {
            'id': self.id,
            'items': [item.to_dict() for item in self.items],
            'subtotal': str(self.subtotal),
            'tax': str(self.tax),
            'total': str(self.total),
            'discount': str(self.discount),
            'customer_id': self.customer_id,
            'payment_method': self.payment_method,
            'status': self.status.value,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
