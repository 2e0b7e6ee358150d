"""Sale Item model."""
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from pos.database import Base


class SaleItem(Base):
    """
    Sale Item - frozen copy of a cart line at checkout.

    product_id is kept without a foreign key so that deleting a product
    never rewrites sale history.
    """

    __tablename__ = 'sale_item'

    id = Column(Integer, primary_key=True, autoincrement=True)
    sale_id = Column(Integer, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(200), nullable=False)
    barcode = Column(String(64), nullable=False, default='')
    unit = Column(String(30), nullable=False, default='')
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='items')

    def __repr__(self):
        return f"<SaleItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"

    def to_dict(self):
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'barcode': self.barcode,
            'unit': self.unit,
            'quantity': self.quantity,
            'price': str(self.price),
            'original_price': str(self.original_price),
            'total': str(self.total),
        }
