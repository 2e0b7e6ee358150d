"""Product model."""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime
from pos.database import Base


class Product(Base):
    """Product (catalog item)."""

    __tablename__ = 'product'

    id = Column(Integer, primary_key=True, autoincrement=True)
    barcode = Column(String(64), nullable=False, default='', server_default='')
    internal_code = Column(String(64), nullable=False, default='', server_default='')
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default='', server_default='')
    category = Column(String(100), nullable=False, default='', server_default='')
    unit = Column(String(30), nullable=False, default='pieza', server_default='pieza')
    purchase_price = Column(Numeric(10, 2), nullable=False, default=0, server_default='0')
    selling_price = Column(Numeric(10, 2), nullable=False, default=0, server_default='0')
    margin = Column(Numeric(7, 2), nullable=False, default=0, server_default='0')
    # May go negative: reservations never floor at zero unless ALLOW_NEGATIVE_STOCK is off
    current_stock = Column(Integer, nullable=False, default=0, server_default='0')
    min_stock = Column(Integer, nullable=False, default=0, server_default='0')
    image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', barcode='{self.barcode}')>"

    @property
    def is_low_stock(self):
        """Stock at or below the configured minimum."""
        return self.current_stock <= self.min_stock

    def to_dict(self):
        return {
            'id': self.id,
            'barcode': self.barcode,
            'internal_code': self.internal_code,
            'name': self.name,
            'description': self.description,
            'category': self.category,
            'unit': self.unit,
            'purchase_price': str(self.purchase_price),
            'selling_price': str(self.selling_price),
            'margin': str(self.margin),
            'current_stock': self.current_stock,
            'min_stock': self.min_stock,
            'image_url': self.image_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
