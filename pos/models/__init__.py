"""Models package - exports all SQLAlchemy models."""
from pos.models.product import Product
from pos.models.customer import Customer
from pos.models.sale import Sale, SaleStatus
from pos.models.sale_item import SaleItem
from pos.models.purchase import Purchase, PurchaseItem, PurchaseStatus
from pos.models.setting import Setting

__all__ = [
    'Product', 'Customer',
    'Sale', 'SaleStatus', 'SaleItem',
    'Purchase', 'PurchaseItem', 'PurchaseStatus',
    'Setting',
]
