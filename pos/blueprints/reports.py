"""Reports blueprint - sales totals and dashboard summary."""
from datetime import datetime
from typing import Any, Dict
from flask import Blueprint, request, current_app
from pos.database import get_session
from pos.exceptions import BusinessLogicError
from pos.services import report_service

reports_bp = Blueprint('reports', __name__, url_prefix='/reports')


def _reference_time():
    """?now=ISO-8601 lets callers ask for a past point in time."""
    raw = request.args.get('now')
    if not raw:
        return datetime.now()
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise BusinessLogicError('Fecha inválida, use formato ISO 8601')


@reports_bp.route('/summary', methods=['GET'])
def summary() -> Dict[str, Any]:
    session = get_session()
    data = report_service.get_dashboard_summary(
        session,
        now=_reference_time(),
        week_start_day=current_app.config.get('WEEK_START_DAY', report_service.SUNDAY),
    )
    return {
        'daily_sales': str(data['daily_sales']),
        'weekly_sales': str(data['weekly_sales']),
        'monthly_sales': str(data['monthly_sales']),
        'sales_count': data['sales_count'],
        'products_sold': data['products_sold'],
        'product_count': data['product_count'],
        'low_stock_products': data['low_stock_products'],
        'recent_sales': [s.to_dict() for s in data['recent_sales']],
    }
