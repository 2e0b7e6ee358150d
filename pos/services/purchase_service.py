"""Purchase service - supplier purchase orders. Purchases never touch stock."""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from pos.models import Purchase, PurchaseItem, PurchaseStatus
from pos.exceptions import BusinessLogicError, NotFoundError
from pos.utils.number_format import to_money

logger = logging.getLogger(__name__)


def _parse_status(value) -> PurchaseStatus:
    if isinstance(value, PurchaseStatus):
        return value
    try:
        return PurchaseStatus(value)
    except ValueError:
        raise BusinessLogicError(f'Estado de compra inválido: {value}')


def _build_items(items: List[Dict[str, Any]]) -> List[PurchaseItem]:
    if not items:
        raise BusinessLogicError('La compra debe tener al menos un producto')

    built = []
    for index, item in enumerate(items, start=1):
        name = (item.get('product_name') or '').strip()
        if not name:
            raise BusinessLogicError(f'Línea {index}: el nombre del producto es obligatorio')
        try:
            quantity = int(item.get('quantity', 0))
            price = to_money(item.get('price', 0))
        except (TypeError, ValueError, InvalidOperation):
            raise BusinessLogicError(f'Línea {index}: cantidad o precio inválido')
        if quantity <= 0:
            raise BusinessLogicError(f'Línea {index}: la cantidad debe ser mayor a 0')
        if price < 0:
            raise BusinessLogicError(f'Línea {index}: el precio no puede ser negativo')
        built.append(PurchaseItem(
            product_id=item.get('product_id'),
            product_name=name,
            quantity=quantity,
            price=price,
            total=price * quantity,
        ))
    return built


def _items_total(items: List[PurchaseItem]) -> Decimal:
    return to_money(sum((item.total for item in items), Decimal('0')))


def get_purchase(session, purchase_id: int) -> Optional[Purchase]:
    return session.query(Purchase).filter(Purchase.id == purchase_id).first()


def get_purchase_or_404(session, purchase_id: int) -> Purchase:
    purchase = get_purchase(session, purchase_id)
    if not purchase:
        raise NotFoundError(f'Compra #{purchase_id} no encontrada')
    return purchase


def list_purchases(session) -> List[Purchase]:
    return session.query(Purchase).order_by(Purchase.created_at.desc(), Purchase.id.desc()).all()


def create_purchase(session, data: Dict[str, Any]) -> Purchase:
    """Create a purchase order; total = sum of quantity * price."""
    supplier = (data.get('supplier') or '').strip()
    if not supplier:
        raise BusinessLogicError('El proveedor es obligatorio')

    items = _build_items(data.get('items') or [])
    purchase = Purchase(
        supplier=supplier,
        status=_parse_status(data.get('status', PurchaseStatus.PENDING)),
        items=items,
        total=_items_total(items),
    )
    try:
        session.add(purchase)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("[PURCHASES] Purchase %s created total=%s", purchase.id, purchase.total)
    return purchase


def update_purchase(session, purchase_id: int, data: Dict[str, Any]) -> Purchase:
    """Partial update. The total is recomputed only when items are replaced."""
    purchase = get_purchase_or_404(session, purchase_id)

    if 'supplier' in data:
        supplier = (data.get('supplier') or '').strip()
        if not supplier:
            raise BusinessLogicError('El proveedor es obligatorio')
        purchase.supplier = supplier
    if 'status' in data:
        purchase.status = _parse_status(data['status'])
    if data.get('items') is not None:
        items = _build_items(data['items'])
        purchase.items = items
        purchase.total = _items_total(items)

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    return purchase


def delete_purchase(session, purchase_id: int) -> None:
    purchase = get_purchase_or_404(session, purchase_id)
    try:
        session.delete(purchase)
        session.commit()
    except Exception:
        session.rollback()
        raise
