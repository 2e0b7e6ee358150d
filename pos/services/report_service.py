"""
Report service - sales totals per period and dashboard summary.

Periods run from their local start up to `now` (both ends inclusive) and
only count completed sales.
"""
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional
from sqlalchemy import func
from pos.models import Product, Sale, SaleItem, SaleStatus
from pos.services import product_service, sales_service
from pos.utils.number_format import to_money

SUNDAY = 0


def start_of_day(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min)


def start_of_week(now: datetime, week_start_day: int = SUNDAY) -> datetime:
    """
    Local midnight of the first day of the current week.

    week_start_day counts from Sunday = 0 (Monday = 1, ...).
    """
    day_index = (now.weekday() + 1) % 7  # date.weekday() has Monday = 0
    days_back = (day_index - week_start_day) % 7
    return start_of_day(now) - timedelta(days=days_back)


def start_of_month(now: datetime) -> datetime:
    return datetime.combine(now.date().replace(day=1), time.min)


def total_sales_between(session, start: datetime, end: datetime) -> Decimal:
    """Sum of completed sale totals with start <= created_at <= end."""
    result = session.query(
        func.coalesce(func.sum(Sale.total), 0)
    ).filter(
        Sale.status == SaleStatus.COMPLETED,
        Sale.created_at >= start,
        Sale.created_at <= end,
    ).scalar()
    return to_money(result or 0)


def get_daily_sales(session, now: Optional[datetime] = None) -> Decimal:
    now = now or datetime.now()
    return total_sales_between(session, start_of_day(now), now)


def get_weekly_sales(session, now: Optional[datetime] = None, week_start_day: int = SUNDAY) -> Decimal:
    now = now or datetime.now()
    return total_sales_between(session, start_of_week(now, week_start_day), now)


def get_monthly_sales(session, now: Optional[datetime] = None) -> Decimal:
    now = now or datetime.now()
    return total_sales_between(session, start_of_month(now), now)


def get_dashboard_summary(session, now: Optional[datetime] = None, week_start_day: int = SUNDAY) -> dict:
    """
    Aggregated figures for the dashboard.

    Returns:
        dict with keys daily_sales, weekly_sales, monthly_sales,
        sales_count, products_sold, product_count, low_stock_products,
        recent_sales
    """
    now = now or datetime.now()

    sales_count = session.query(func.count(Sale.id)).filter(
        Sale.status == SaleStatus.COMPLETED
    ).scalar() or 0

    products_sold = session.query(
        func.coalesce(func.sum(SaleItem.quantity), 0)
    ).join(Sale, Sale.id == SaleItem.sale_id).filter(
        Sale.status == SaleStatus.COMPLETED
    ).scalar() or 0

    product_count = session.query(func.count(Product.id)).scalar() or 0

    low_stock = [
        {
            'id': p.id,
            'name': p.name,
            'current_stock': p.current_stock,
            'min_stock': p.min_stock,
        }
        for p in product_service.get_low_stock_products(session)
    ]

    return {
        'daily_sales': get_daily_sales(session, now),
        'weekly_sales': get_weekly_sales(session, now, week_start_day),
        'monthly_sales': get_monthly_sales(session, now),
        'sales_count': sales_count,
        'products_sold': int(products_sold),
        'product_count': product_count,
        'low_stock_products': low_stock,
        'recent_sales': sales_service.get_recent_sales(session, limit=5),
    }
