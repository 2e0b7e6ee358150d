"""
Sales service - persisted sale ledger.
Stores finalized carts as Sale/SaleItem rows and removes them on correction.
"""
import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import selectinload
from pos.database import get_session
from pos.models import Sale, SaleItem, SaleStatus, Customer
from pos.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def get_sale(session, sale_id: int) -> Optional[Sale]:
    return (
        session.query(Sale)
        .options(selectinload(Sale.items))
        .filter(Sale.id == sale_id)
        .first()
    )


def get_sale_or_404(session, sale_id: int) -> Sale:
    sale = get_sale(session, sale_id)
    if not sale:
        raise NotFoundError(f'Venta #{sale_id} no encontrada')
    return sale


def get_sale_history(session, status: Optional[SaleStatus] = None, limit: Optional[int] = None) -> List[Sale]:
    """Sales in creation order (oldest first), optionally filtered by status."""
    query = session.query(Sale).options(selectinload(Sale.items))
    if status is not None:
        query = query.filter(Sale.status == status)
    query = query.order_by(Sale.created_at.asc(), Sale.id.asc())
    if limit:
        query = query.limit(limit)
    return query.all()


def get_recent_sales(session, limit: int = 5) -> List[Sale]:
    return (
        session.query(Sale)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .all()
    )


def record_sale(session, lines, totals, payment_method: str, customer_id: Optional[int] = None,
                status: SaleStatus = SaleStatus.COMPLETED, created_at: Optional[datetime] = None) -> Sale:
    """
    Persist a finalized cart in one transaction.

    Stock changes still pending on the session are committed together with the sale.
    """
    if customer_id is not None:
        exists = session.query(Customer.id).filter(Customer.id == customer_id).first()
        if not exists:
            raise NotFoundError(f'Cliente #{customer_id} no encontrado')

    try:
        sale = Sale(
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            discount=totals.discount,
            customer_id=customer_id,
            payment_method=payment_method,
            status=status,
            created_at=created_at or datetime.now(),
        )
        for position, line in enumerate(lines):
            sale.items.append(SaleItem(
                position=position,
                product_id=line.product_id,
                product_name=line.product.name,
                barcode=line.product.barcode,
                unit=line.product.unit,
                quantity=line.quantity,
                price=line.price,
                original_price=line.original_price,
                total=line.total,
            ))
        session.add(sale)
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("[SALES] Sale %s recorded total=%s", sale.id, sale.total)
    return sale


def remove_sale(session, sale_id: int) -> None:
    """Delete a sale and its items, committing any pending stock reversal with it."""
    sale = get_sale_or_404(session, sale_id)
    try:
        session.delete(sale)
        session.commit()
    except Exception:
        session.rollback()
        raise


class SqlSaleLedger:
    """Sale ledger port used by the cart engine."""

    def __init__(self, session_factory=get_session):
        self._session = session_factory

    def record_sale(self, lines, totals, payment_method, customer_id=None) -> Sale:
        return record_sale(self._session(), lines, totals, payment_method, customer_id)

    def get_sale_items(self, sale_id: int) -> List[SaleItem]:
        return list(get_sale_or_404(self._session(), sale_id).items)

    def remove_sale(self, sale_id: int) -> None:
        remove_sale(self._session(), sale_id)
