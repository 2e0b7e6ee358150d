"""
Receipt service - renders a finalized sale as fixed-width ticket text.

Printer drivers, PDF and QR output stay outside this module; callers send the
returned text wherever it needs to go.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pos.utils.formatters import money, datetime_mx

LINE_WIDTH = 39
NAME_WIDTH = 16
SEPARATOR = '-' * LINE_WIDTH
CASH_METHODS = ('efectivo', 'cash')


def _center(text: str) -> str:
    return text.center(LINE_WIDTH).rstrip()


def _amount_line(label: str, amount) -> str:
    label = f'{label}:'
    return label + money(amount).rjust(LINE_WIDTH - len(label))


def _item_line(item) -> str:
    name = item.product_name.ljust(NAME_WIDTH)[:NAME_WIDTH]
    quantity = str(item.quantity).rjust(4)
    price = money(item.price).rjust(8)
    total = money(item.total).rjust(8)
    return f'{name} {quantity} {price} {total}'


def render_receipt(sale, business_info: Dict[str, Any], receipt_settings: Dict[str, Any],
                   payment_info: Optional[Dict[str, Any]] = None) -> str:
    """
    Build the ticket text for `sale`.

    payment_info may carry cash_received and change for cash payments.
    The ticket number is the sale id.
    """
    lines: List[str] = []

    if receipt_settings.get('print_header', True):
        lines.append(_center(business_info.get('name') or ''))
        if business_info.get('address'):
            lines.append(_center(business_info['address']))
        if business_info.get('phone'):
            lines.append(_center(f"Tel: {business_info['phone']}"))
        if business_info.get('tax_id'):
            lines.append(_center(f"RFC: {business_info['tax_id']}"))
        lines.append('')

    lines.append(_center(f'Fecha: {datetime_mx(sale.created_at)}'))
    lines.append(_center(f'Ticket #: {sale.id}'))
    lines.append(SEPARATOR)
    lines.append(f"{'Producto':<{NAME_WIDTH}} {'Cant':>4} {'Precio':>8} {'Total':>8}")
    lines.append(SEPARATOR)
    for item in sale.items:
        lines.append(_item_line(item))
    lines.append(SEPARATOR)

    lines.append(_amount_line('Subtotal', sale.subtotal))
    if receipt_settings.get('enable_tax', False):
        lines.append(_amount_line('IVA', sale.tax))
    if sale.discount and Decimal(str(sale.discount)) > 0:
        lines.append(_amount_line('Descuento', sale.discount))
    lines.append(_amount_line('Total', sale.total))
    lines.append('')

    lines.append(f'Método de pago: {sale.payment_method}')
    if payment_info and (sale.payment_method or '').lower() in CASH_METHODS:
        if payment_info.get('cash_received') is not None:
            lines.append(_amount_line('Efectivo', payment_info['cash_received']))
        if payment_info.get('change') is not None:
            lines.append(_amount_line('Cambio', payment_info['change']))

    if receipt_settings.get('print_footer', True) and receipt_settings.get('footer_message'):
        lines.append(SEPARATOR)
        lines.append(_center(receipt_settings['footer_message']))

    return '\n'.join(lines) + '\n'
