"""
Utilidades de formateo para tickets y respuestas.
"""
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union


def money(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Formatea un monto con exactamente 2 decimales y punto decimal.

    Examples:
        money(85) -> "85.00"
        money(Decimal('13.6')) -> "13.60"
        money(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        num = Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    return f"{num:.2f}"


def datetime_mx(value: Union[datetime, None], with_time: bool = True) -> str:
    """
    Formatea un datetime como DD/MM/YYYY HH:MM

    Examples:
        datetime_mx(datetime(2026, 1, 12, 15, 30)) -> "12/01/2026 15:30"
        datetime_mx(datetime(2026, 1, 12, 15, 30), with_time=False) -> "12/01/2026"
    """
    if value is None:
        return "-"

    if not isinstance(value, (datetime, date)):
        return "-"

    if with_time and isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    return value.strftime("%d/%m/%Y")
