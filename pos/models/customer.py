"""Customer model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.orm import relationship
from pos.database import Base


class Customer(Base):
    """Customer (cliente)."""

    __tablename__ = 'customer'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    tax_id = Column(String(50), nullable=False, default='', server_default='')
    email = Column(String(255), nullable=False, default='', server_default='')
    phone = Column(String(50), nullable=False, default='', server_default='')
    postal_code = Column(String(20), nullable=False, default='', server_default='')
    address = Column(Text, nullable=False, default='', server_default='')
    tax_regime = Column(String(120), nullable=False, default='', server_default='')
    invoice_usage = Column(String(120), nullable=False, default='', server_default='')
    is_default = Column(Boolean, nullable=False, default=False, server_default='0')
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    # Relationships
    sales = relationship('Sale', back_populates='customer')

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}', is_default={self.is_default})>"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'tax_id': self.tax_id,
            'email': self.email,
            'phone': self.phone,
            'postal_code': self.postal_code,
            'address': self.address,
            'tax_regime': self.tax_regime,
            'invoice_usage': self.invoice_usage,
            'is_default': self.is_default,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
