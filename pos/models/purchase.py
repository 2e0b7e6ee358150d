"""Purchase model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from pos.database import Base
import enum


class PurchaseStatus(enum.Enum):
    """Purchase status enum."""
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Purchase(Base):
    """Purchase (orden de compra a proveedor)."""

    __tablename__ = 'purchase'

    id = Column(Integer, primary_key=True, autoincrement=True)
    supplier = Column(String(200), nullable=False)
    status = Column(Enum(PurchaseStatus, name='purchase_status'), nullable=False, default=PurchaseStatus.PENDING)
    total = Column(Numeric(14, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # Relationships
    items = relationship('PurchaseItem', back_populates='purchase', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Purchase(id={self.id}, supplier='{self.supplier}', status={self.status.value})>"

    def to_dict(self):
        return {
            'id': self.id,
            'supplier': self.supplier,
            'items': [item.to_dict() for item in self.items],
            'status': self.status.value,
            'total': str(self.total),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class PurchaseItem(Base):
    """Purchase Item (detalle de compra)."""

    __tablename__ = 'purchase_item'

    id = Column(Integer, primary_key=True, autoincrement=True)
    purchase_id = Column(Integer, ForeignKey('purchase.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(Integer, nullable=True)
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(14, 2), nullable=False)
    total = Column(Numeric(14, 2), nullable=False)

    # Relationships
    purchase = relationship('Purchase', back_populates='items')

    def __repr__(self):
        return f"<PurchaseItem(id={self.id}, product_name='{self.product_name}', quantity={self.quantity})>"

    def to_dict(self):
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'price': str(self.price),
            'total': str(self.total),
        }
