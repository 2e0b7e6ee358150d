"""Customer service - customer records and the default walk-in customer."""
import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import or_, func
from sqlalchemy.exc import IntegrityError
from pos.models import Customer
from pos.exceptions import BusinessLogicError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER = {
    'name': 'Cliente General',
    'tax_id': 'XAXX010101000',
    'email': 'general@example.com',
    'phone': '555-0000',
    'postal_code': '00000',
    'address': 'Conocido',
    'tax_regime': 'Régimen Simplificado de Confianza',
    'invoice_usage': 'G03 - Gastos en general',
}

CUSTOMER_FIELDS = (
    'name', 'tax_id', 'email', 'phone', 'postal_code', 'address',
    'tax_regime', 'invoice_usage',
)


def _apply_fields(customer: Customer, data: Dict[str, Any]) -> None:
    for field in CUSTOMER_FIELDS:
        if field in data and data[field] is not None:
            value = data[field]
            setattr(customer, field, value.strip() if isinstance(value, str) else value)


def get_customer(session, customer_id: int) -> Optional[Customer]:
    return session.query(Customer).filter(Customer.id == customer_id).first()


def get_customer_or_404(session, customer_id: int) -> Customer:
    customer = get_customer(session, customer_id)
    if not customer:
        raise NotFoundError(f'Cliente #{customer_id} no encontrado')
    return customer


def create_customer(session, data: Dict[str, Any]) -> Customer:
    """Create a customer. Name is required."""
    if not (data.get('name') or '').strip():
        raise BusinessLogicError('El nombre del cliente es obligatorio')

    customer = Customer()
    _apply_fields(customer, data)
    try:
        session.add(customer)
        session.commit()
    except Exception:
        session.rollback()
        raise
    logger.info("[CUSTOMERS] Customer created id=%s", customer.id)
    return customer


def update_customer(session, customer_id: int, data: Dict[str, Any]) -> Customer:
    customer = get_customer_or_404(session, customer_id)
    if 'name' in data and not (data.get('name') or '').strip():
        raise BusinessLogicError('El nombre del cliente es obligatorio')

    _apply_fields(customer, data)
    try:
        session.commit()
    except Exception:
        session.rollback()
        raise
    return customer


def delete_customer(session, customer_id: int) -> None:
    """Delete a customer; past sales keep their totals and lose the link."""
    customer = get_customer_or_404(session, customer_id)
    try:
        for sale in customer.sales:
            sale.customer_id = None
        session.delete(customer)
        session.commit()
    except Exception:
        session.rollback()
        raise


def search_customers(session, query: str = '') -> List[Customer]:
    """Case-insensitive substring search over name, tax id and email."""
    base = session.query(Customer)
    term = (query or '').strip().lower()
    if term:
        pattern = f'%{term[:100]}%'
        base = base.filter(or_(
            func.lower(Customer.name).like(pattern),
            func.lower(Customer.tax_id).like(pattern),
            func.lower(Customer.email).like(pattern),
        ))
    return base.order_by(Customer.name).all()


def get_or_create_default_customer(session) -> Customer:
    """
    Get or create the default "Cliente General" customer.

    Idempotent: an existing default customer is always returned.
    """
    default_customer = session.query(Customer).filter(Customer.is_default.is_(True)).first()
    if default_customer:
        return default_customer

    try:
        customer = Customer(is_default=True)
        _apply_fields(customer, DEFAULT_CUSTOMER)
        session.add(customer)
        session.commit()
        return customer
    except IntegrityError:
        # Created concurrently by another request
        session.rollback()
        default_customer = session.query(Customer).filter(Customer.is_default.is_(True)).first()
        if default_customer:
            return default_customer
        raise
