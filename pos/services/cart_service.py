"""
Sale Cart Service - the in-progress POS transaction.

The cart reserves stock eagerly: every add/update/remove is mirrored on the
product's current_stock through the catalog port, so the catalog always
reflects what is sitting in the cart. Checkout turns the reservation into
consumption; clear() hands it back.

The engine never reaches for globals. It is built with three ports:

- catalog:  get_by_id(id) -> product | None, update_stock(id, delta), search(query),
            commit(), rollback()
- settings: wholesale_settings() -> WholesaleSettings, enable_tax() -> bool
- ledger:   record_sale(lines, totals, payment_method, customer_id) -> sale,
            get_sale_items(sale_id) -> items, remove_sale(sale_id)

SqlCatalog / SqlSettings below (and SqlSaleLedger in sales_service) adapt the
SQLAlchemy services to those ports.

Every mutation commits its stock changes through catalog.commit() before the
lock is released; a failed write rolls back both the database and the
in-memory lines.
"""
import enum
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pos.database import get_session
from pos.exceptions import InvalidOperationError, NotFoundError, InsufficientStockError
from pos.services import product_service, setting_service
from pos.services.setting_service import WholesaleSettings, MIN_QUANTITY_TOTAL
from pos.utils.number_format import to_money

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal('0.16')


class CartState(enum.Enum):
    """Cart lifecycle."""
    EMPTY = "empty"
    BUILDING = "building"
    FINALIZING = "finalizing"


@dataclass(frozen=True)
class ProductSnapshot:
    """Product data captured when the line was (last) added."""
    id: int
    name: str
    barcode: str
    unit: str
    selling_price: Decimal

    @classmethod
    def from_product(cls, product) -> 'ProductSnapshot':
        return cls(
            id=product.id,
            name=product.name,
            barcode=product.barcode or '',
            unit=product.unit or '',
            selling_price=to_money(product.selling_price),
        )


@dataclass
class CartLine:
    """One product in the cart. total is always quantity * price."""
    product_id: int
    quantity: int
    price: Decimal
    original_price: Decimal
    product: ProductSnapshot
    price_overridden: bool = False

    @property
    def total(self) -> Decimal:
        return self.price * self.quantity

    @property
    def discount(self) -> Decimal:
        return (self.original_price - self.price) * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'product_name': self.product.name,
            'quantity': self.quantity,
            'price': str(self.price),
            'original_price': str(self.original_price),
            'total': str(self.total),
            'price_overridden': self.price_overridden,
        }


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    discount: Decimal

    def to_dict(self) -> Dict[str, str]:
        return {
            'subtotal': str(self.subtotal),
            'tax': str(self.tax),
            'total': str(self.total),
            'discount': str(self.discount),
        }


def evaluate_line_price(line: CartLine, wholesale: WholesaleSettings, cart_quantity: int) -> Decimal:
    """
    Charged unit price for `line` under the wholesale policy.

    cart_quantity is the sum of quantities across the whole cart, already
    including the change being applied.
    """
    if line.price_overridden:
        return line.price
    if not wholesale.enabled:
        return line.original_price

    if wholesale.min_quantity_type == MIN_QUANTITY_TOTAL:
        qualifies = cart_quantity >= wholesale.min_quantity
    else:
        qualifies = line.quantity >= wholesale.min_quantity

    if not qualifies:
        return line.original_price
    factor = 1 - Decimal(str(wholesale.discount_percentage)) / 100
    return to_money(line.original_price * factor)


def _validate_quantity(quantity, minimum: int) -> int:
    if isinstance(quantity, bool):
        raise InvalidOperationError('La cantidad debe ser un número entero')
    try:
        value = int(quantity)
    except (TypeError, ValueError):
        raise InvalidOperationError('La cantidad debe ser un número entero')
    if value != quantity and Decimal(str(quantity)) != value:
        raise InvalidOperationError('La cantidad debe ser un número entero')
    if value < minimum:
        raise InvalidOperationError(f'La cantidad debe ser al menos {minimum}')
    return value


class SaleCart:
    """
    Working cart for one register.

    All mutations hold a re-entrant lock so cart contents and stock
    reservations change together even under a threaded WSGI server.
    """

    def __init__(self, catalog, settings, ledger, tax_rate=DEFAULT_TAX_RATE,
                 allow_negative_stock: bool = True, global_resweep: bool = False):
        self.catalog = catalog
        self.settings = settings
        self.ledger = ledger
        self.tax_rate = Decimal(str(tax_rate))
        self.allow_negative_stock = allow_negative_stock
        # False reproduces per-mutation evaluation: only the touched line is repriced
        self.global_resweep = global_resweep
        self._lines: List[CartLine] = []
        self._state = CartState.EMPTY
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def lines(self) -> List[CartLine]:
        with self._lock:
            return list(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def get_line(self, product_id: int) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def total_quantity(self) -> int:
        return sum(line.quantity for line in self._lines)

    def reserved_quantities(self) -> Dict[int, int]:
        """product_id -> units currently reserved by the cart."""
        with self._lock:
            return {line.product_id: line.quantity for line in self._lines}

    def compute_totals(self) -> CartTotals:
        with self._lock:
            subtotal = to_money(sum((line.total for line in self._lines), Decimal('0')))
            tax = to_money(subtotal * self.tax_rate) if self.settings.enable_tax() else Decimal('0.00')
            discount = to_money(sum((line.discount for line in self._lines), Decimal('0')))
            return CartTotals(subtotal=subtotal, tax=tax, total=subtotal + tax, discount=discount)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'state': self._state.value,
                'items': [line.to_dict() for line in self._lines],
                'total_quantity': self.total_quantity(),
                **self.compute_totals().to_dict(),
            }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _check_stock(self, product, units: int) -> None:
        """Reject a reservation of `units` more when negative stock is disallowed."""
        if self.allow_negative_stock or units <= 0:
            return
        available = product.current_stock or 0
        if available - units < 0:
            raise InsufficientStockError(product.name, units, available)

    @contextmanager
    def _mutation(self):
        """
        Hold the lock across the cart change, the stock writes and their commit.

        On any error the catalog is rolled back and the lines are restored.
        """
        with self._lock:
            saved_lines = [replace(line) for line in self._lines]
            saved_state = self._state
            try:
                yield
                self.catalog.commit()
            except Exception:
                self.catalog.rollback()
                self._lines = saved_lines
                self._state = saved_state
                raise

    def _reprice(self, line: Optional[CartLine], wholesale: WholesaleSettings) -> None:
        cart_quantity = self.total_quantity()
        targets = self._lines if self.global_resweep else [line]
        for target in targets:
            if target is not None:
                target.price = evaluate_line_price(target, wholesale, cart_quantity)

    def _refresh_state(self) -> None:
        self._state = CartState.BUILDING if self._lines else CartState.EMPTY

    def add_item(self, product_id: int, quantity: int = 1) -> CartLine:
        """Add units of a product, reserving them from stock."""
        quantity = _validate_quantity(quantity, minimum=1)
        with self._mutation():
            product = self.catalog.get_by_id(product_id)
            if product is None:
                raise NotFoundError(f'Producto #{product_id} no encontrado')
            self._check_stock(product, quantity)

            wholesale = self.settings.wholesale_settings()
            snapshot = ProductSnapshot.from_product(product)
            self.catalog.update_stock(product.id, -quantity)

            line = self.get_line(product.id)
            if line:
                line.quantity += quantity
                line.original_price = snapshot.selling_price
                line.product = snapshot
            else:
                line = CartLine(
                    product_id=product.id,
                    quantity=quantity,
                    price=snapshot.selling_price,
                    original_price=snapshot.selling_price,
                    product=snapshot,
                )
                self._lines.append(line)

            self._reprice(line, wholesale)
            self._refresh_state()
        logger.debug("[CART] +%s x product %s @ %s", quantity, product_id, line.price)
        return line

    def remove_item(self, product_id: int) -> None:
        """Drop a line and release its reservation. Unknown products are ignored."""
        with self._mutation():
            line = self.get_line(product_id)
            if line is None:
                return
            if self.catalog.get_by_id(product_id) is not None:
                self.catalog.update_stock(product_id, line.quantity)
            self._lines.remove(line)
            if self.global_resweep:
                self._reprice(None, self.settings.wholesale_settings())
            self._refresh_state()

    def update_quantity(self, product_id: int, new_quantity: int) -> Optional[CartLine]:
        """
        Set a line's quantity, adjusting the reservation by the difference.

        Zero removes the line. Unknown products are ignored.
        """
        new_quantity = _validate_quantity(new_quantity, minimum=0)
        with self._mutation():
            line = self.get_line(product_id)
            if line is None:
                return None
            if new_quantity == 0:
                self.remove_item(product_id)
                return None

            product = self.catalog.get_by_id(product_id)
            if product is None:
                raise NotFoundError(f'Producto #{product_id} no encontrado')
            delta = new_quantity - line.quantity
            self._check_stock(product, delta)

            wholesale = self.settings.wholesale_settings()
            if delta:
                self.catalog.update_stock(product_id, -delta)
            line.quantity = new_quantity
            self._reprice(line, wholesale)
            return line

    def override_price(self, product_id: int, price) -> Optional[CartLine]:
        """Charge a manual unit price for a line; wholesale rules stop applying to it."""
        try:
            price = to_money(price)
        except (ArithmeticError, ValueError, TypeError):
            raise InvalidOperationError('Precio inválido')
        if price < 0:
            raise InvalidOperationError('El precio no puede ser negativo')
        with self._lock:
            line = self.get_line(product_id)
            if line is None:
                return None
            line.price = price
            line.price_overridden = True
            return line

    def clear(self) -> None:
        """Empty the cart and release every reservation."""
        with self._mutation():
            for line in self._lines:
                if self.catalog.get_by_id(line.product_id) is not None:
                    self.catalog.update_stock(line.product_id, line.quantity)
            self._lines = []
            self._refresh_state()

    def checkout(self, payment_method: str, customer_id: Optional[int] = None):
        """
        Freeze the cart into a completed sale.

        Reservations become permanent consumption (stock is not touched).
        Payment sufficiency is the caller's job.
        """
        with self._lock:
            if not self._lines:
                raise InvalidOperationError('El carrito está vacío')
            if not payment_method:
                raise InvalidOperationError('El método de pago es obligatorio')

            totals = self.compute_totals()
            frozen = [replace(line) for line in self._lines]
            self._state = CartState.FINALIZING
            try:
                sale = self.ledger.record_sale(frozen, totals, payment_method, customer_id)
            except Exception:
                self._refresh_state()
                raise

            self._lines = []
            self._refresh_state()
            logger.info("[CART] Checkout total=%s lines=%d payment=%s",
                        totals.total, len(frozen), payment_method)
            return sale

    def delete_sale(self, sale_id: int) -> Dict[str, Any]:
        """Remove a finalized sale and return its units to stock."""
        with self._lock:
            items = self.ledger.get_sale_items(sale_id)
            restored = []
            try:
                for item in items:
                    if self.catalog.get_by_id(item.product_id) is None:
                        logger.warning("[CART] Sale %s: product %s no longer exists, stock not restored",
                                       sale_id, item.product_id)
                        continue
                    self.catalog.update_stock(item.product_id, item.quantity)
                    restored.append({'product_id': item.product_id, 'quantity': item.quantity})
                # Commits the stock reversal together with the deletion
                self.ledger.remove_sale(sale_id)
            except Exception:
                self.catalog.rollback()
                raise
            logger.info("[CART] Sale %s deleted, %d lines restored", sale_id, len(restored))
            return {'sale_id': sale_id, 'restored': restored}


# ----------------------------------------------------------------------
# SQLAlchemy adapters
# ----------------------------------------------------------------------

class SqlCatalog:
    """
    Catalog port over product_service.

    Stock is changed with an in-SQL increment and reads lock the product row
    (FOR UPDATE where the backend supports it) until commit() or rollback().
    """

    def __init__(self, session_factory=get_session):
        self._session = session_factory

    def get_by_id(self, product_id: int):
        return product_service.get_product_for_update(self._session(), product_id)

    def update_stock(self, product_id: int, delta: int) -> None:
        product_service.update_stock(self._session(), product_id, delta)

    def search(self, query: str):
        return product_service.search_products(self._session(), query)

    def commit(self) -> None:
        self._session().commit()

    def rollback(self) -> None:
        self._session().rollback()


class SqlSettings:
    """Settings port over setting_service."""

    def __init__(self, session_factory=get_session):
        self._session = session_factory

    def wholesale_settings(self) -> WholesaleSettings:
        return setting_service.get_wholesale_settings(self._session())

    def enable_tax(self) -> bool:
        return setting_service.is_tax_enabled(self._session())


def build_cart(app, session_factory=get_session) -> SaleCart:
    """Create a cart wired to the SQL adapters using the app's configuration."""
    from pos.services.sales_service import SqlSaleLedger

    return SaleCart(
        catalog=SqlCatalog(session_factory),
        settings=SqlSettings(session_factory),
        ledger=SqlSaleLedger(session_factory),
        tax_rate=app.config.get('TAX_RATE', DEFAULT_TAX_RATE),
        allow_negative_stock=app.config.get('ALLOW_NEGATIVE_STOCK', True),
        global_resweep=app.config.get('WHOLESALE_GLOBAL_RESWEEP', False),
    )


def init_cart(app) -> SaleCart:
    """Attach the register's cart to the application."""
    cart = build_cart(app)
    app.extensions['pos_cart'] = cart
    return cart


def get_cart() -> SaleCart:
    """Cart of the current application."""
    from flask import current_app
    return current_app.extensions['pos_cart']
