"""
Settings service - business, receipt, tax, wholesale and notification settings.

Each section is stored as a JSON document holding only the values the shop
changed; reads merge them over the built-in defaults.
"""
import copy
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict
from pos.models import Setting
from pos.exceptions import BusinessLogicError, NotFoundError

logger = logging.getLogger(__name__)

MIN_QUANTITY_PER_ITEM = 'perItem'
MIN_QUANTITY_TOTAL = 'total'

DEFAULT_SETTINGS: Dict[str, Dict[str, Any]] = {
    'business_info': {
        'name': 'Mi Tienda',
        'address': '',
        'phone': '',
        'email': '',
        'tax_id': '',
        'logo_url': '',
    },
    'receipt_settings': {
        'show_logo': True,
        'show_qr': True,
        'footer_message': '¡Gracias por su compra!',
        'print_copy': True,
        'extra_image_url': '',
        'printer_name': '',
        'paper_width': 80,
        'font_size': 10,
        'print_header': True,
        'print_footer': True,
        'print_qr': True,
        'copies': 1,
        'enable_tax': False,
    },
    'tax_settings': {
        'default_rate': 16,
        'included_in_price': False,
        'enabled': False,
    },
    'wholesale_settings': {
        'enabled': False,
        'min_quantity_type': MIN_QUANTITY_PER_ITEM,
        'min_quantity': 10,
        'discount_percentage': 10,
    },
    'notification_settings': {
        'low_stock_threshold': 5,
        'enable_email': False,
        'enable_push': True,
    },
}


@dataclass(frozen=True)
class WholesaleSettings:
    """Read-only wholesale discount policy consumed by the cart engine."""
    enabled: bool = False
    min_quantity_type: str = MIN_QUANTITY_PER_ITEM
    min_quantity: int = 10
    discount_percentage: Decimal = Decimal('10')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WholesaleSettings':
        return cls(
            enabled=bool(data.get('enabled', False)),
            min_quantity_type=data.get('min_quantity_type', MIN_QUANTITY_PER_ITEM),
            min_quantity=int(data.get('min_quantity', 10)),
            discount_percentage=Decimal(str(data.get('discount_percentage', 10))),
        )


def _check_section(key: str) -> None:
    if key not in DEFAULT_SETTINGS:
        raise NotFoundError(f'Sección de configuración desconocida: {key}')


def _validate_wholesale(values: Dict[str, Any]) -> None:
    if values['min_quantity_type'] not in (MIN_QUANTITY_PER_ITEM, MIN_QUANTITY_TOTAL):
        raise BusinessLogicError("min_quantity_type debe ser 'perItem' o 'total'")
    try:
        min_quantity = int(values['min_quantity'])
        percentage = Decimal(str(values['discount_percentage']))
    except (TypeError, ValueError, ArithmeticError):
        raise BusinessLogicError('Valores de mayoreo inválidos')
    if min_quantity < 1:
        raise BusinessLogicError('La cantidad mínima de mayoreo debe ser al menos 1')
    if percentage < 0 or percentage > 100:
        raise BusinessLogicError('El porcentaje de descuento debe estar entre 0 y 100')


def get_section(session, key: str) -> Dict[str, Any]:
    """Return the effective values of a section (defaults + stored overrides)."""
    _check_section(key)
    values = copy.deepcopy(DEFAULT_SETTINGS[key])
    row = session.query(Setting).filter(Setting.key == key).first()
    if row and row.value:
        values.update({k: v for k, v in row.value.items() if k in values})
    return values


def get_all_settings(session) -> Dict[str, Dict[str, Any]]:
    return {key: get_section(session, key) for key in DEFAULT_SETTINGS}


def update_section(session, key: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Merge `data` into a section. Unknown keys are ignored."""
    _check_section(key)
    changes = {k: v for k, v in (data or {}).items() if k in DEFAULT_SETTINGS[key]}
    merged = get_section(session, key)
    merged.update(changes)

    if key == 'wholesale_settings':
        _validate_wholesale(merged)

    try:
        row = session.query(Setting).filter(Setting.key == key).first()
        if row is None:
            row = Setting(key=key, value={})
            session.add(row)
        # Reassign so the JSON column is flagged dirty
        row.value = {**(row.value or {}), **changes}
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.info("[SETTINGS] Updated %s: %s", key, sorted(changes))
    return merged


def get_wholesale_settings(session) -> WholesaleSettings:
    return WholesaleSettings.from_dict(get_section(session, 'wholesale_settings'))


def is_tax_enabled(session) -> bool:
    """Tax on checkout is toggled from the receipt settings."""
    return bool(get_section(session, 'receipt_settings').get('enable_tax', False))
