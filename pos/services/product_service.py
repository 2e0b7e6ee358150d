"""
Product service - catalog CRUD, stock adjustments and low-stock queries.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import or_, func
from pos.models import Product
from pos.exceptions import BusinessLogicError, NotFoundError
from pos.utils.number_format import to_money

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    'barcode', 'internal_code', 'name', 'description', 'category', 'unit',
    'purchase_price', 'selling_price', 'current_stock', 'min_stock', 'image_url',
)
MONEY_FIELDS = ('purchase_price', 'selling_price')
INTEGER_FIELDS = ('current_stock', 'min_stock')


def calculate_margin(purchase_price, selling_price) -> Decimal:
    """
    Gross margin over the selling price, as a percentage rounded to 2dp.

    Returns 0 when either price is missing or not positive.
    """
    purchase = Decimal(str(purchase_price or 0))
    selling = Decimal(str(selling_price or 0))
    if purchase <= 0 or selling <= 0:
        return Decimal('0.00')
    margin = (selling - purchase) / selling * 100
    return margin.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _apply_fields(product: Product, data: Dict[str, Any]) -> None:
    for field in PRODUCT_FIELDS:
        if field in data and data[field] is not None:
            value = data[field]
            if field in MONEY_FIELDS:
                try:
                    value = to_money(value)
                except InvalidOperation:
                    raise BusinessLogicError(f'Valor inválido para {field}')
                if value < 0:
                    raise BusinessLogicError(f'{field} no puede ser negativo')
            elif field in INTEGER_FIELDS:
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    raise BusinessLogicError(f'Valor inválido para {field}')
            setattr(product, field, value)
    product.margin = calculate_margin(product.purchase_price, product.selling_price)


def get_product(session, product_id: int) -> Optional[Product]:
    """Return the product or None."""
    return session.query(Product).filter(Product.id == product_id).first()


def get_product_for_update(session, product_id: int) -> Optional[Product]:
    """Return the product with its row locked until the transaction ends (or None)."""
    return (
        session.query(Product)
        .filter(Product.id == product_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def get_product_or_404(session, product_id: int) -> Product:
    product = get_product(session, product_id)
    if not product:
        raise NotFoundError(f'Producto #{product_id} no encontrado')
    return product


def create_product(session, data: Dict[str, Any]) -> Product:
    """Create a product; margin is always derived from the prices."""
    name = (data.get('name') or '').strip()
    if not name:
        raise BusinessLogicError('El nombre del producto es obligatorio')

    product = Product(name=name)
    _apply_fields(product, {**data, 'name': name})
    try:
        session.add(product)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("[CATALOG] Product created id=%s name=%s", product.id, product.name)
    return product


def update_product(session, product_id: int, data: Dict[str, Any]) -> Product:
    """Partially update a product and recompute its margin."""
    product = get_product_or_404(session, product_id)
    if 'name' in data and not (data.get('name') or '').strip():
        raise BusinessLogicError('El nombre del producto es obligatorio')

    _apply_fields(product, data)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    return product


def delete_product(session, product_id: int) -> None:
    product = get_product_or_404(session, product_id)
    try:
        session.delete(product)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("[CATALOG] Product deleted id=%s", product_id)


def search_products(session, query: str = '') -> List[Product]:
    """
    Case-insensitive substring search over name, barcode, internal code,
    description and category. An empty query lists the whole catalog.
    """
    base = session.query(Product)
    term = (query or '').strip().lower()
    if term:
        pattern = f'%{term[:100]}%'
        base = base.filter(or_(
            func.lower(Product.name).like(pattern),
            func.lower(Product.barcode).like(pattern),
            func.lower(Product.internal_code).like(pattern),
            func.lower(Product.description).like(pattern),
            func.lower(Product.category).like(pattern),
        ))
    return base.order_by(Product.name).all()


def get_low_stock_products(session) -> List[Product]:
    """Products whose stock is at or below their minimum (includes negative stock)."""
    return (
        session.query(Product)
        .filter(Product.current_stock <= Product.min_stock)
        .order_by(Product.current_stock.asc(), Product.name)
        .all()
    )


def update_stock(session, product_id: int, delta: int) -> Product:
    """
    Add `delta` (positive or negative) to the product's stock.

    The increment runs in SQL so concurrent registers never overwrite each
    other's change. Does not commit; the caller owns the transaction.
    """
    updated = session.query(Product).filter(Product.id == product_id).update(
        {Product.current_stock: Product.current_stock + int(delta)},
        synchronize_session=False
    )
    if not updated:
        raise NotFoundError(f'Producto #{product_id} no encontrado')
    return session.query(Product).filter(Product.id == product_id).populate_existing().one()


def import_products(session, rows: Iterable[Dict[str, Any]]) -> List[Product]:
    """Bulk-create products from already-parsed rows in a single transaction."""
    products = []
    try:
        for index, row in enumerate(rows, start=1):
            name = (row.get('name') or '').strip()
            if not name:
                raise BusinessLogicError(f'Fila {index}: el nombre del producto es obligatorio')
            product = Product(name=name)
            _apply_fields(product, {**row, 'name': name})
            session.add(product)
            products.append(product)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("[CATALOG] Imported %d products", len(products))
    return products
