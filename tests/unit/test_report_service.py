"""
Unit tests for period sales totals and the dashboard summary.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from pos.models import SaleStatus
from pos.services import report_service, sales_service
from pos.services.cart_service import CartTotals

NOW = datetime(2024, 5, 15, 12, 0)  # Wednesday


def record(session, total, created_at, status=SaleStatus.COMPLETED):
    amount = Decimal(total)
    totals = CartTotals(subtotal=amount, tax=Decimal('0.00'), total=amount, discount=Decimal('0.00'))
    return sales_service.record_sale(session, [], totals, 'efectivo', status=status, created_at=created_at)


@pytest.fixture
def sales(session):
    record(session, '10.00', datetime(2024, 5, 15, 0, 0, 0))      # today, exactly midnight
    record(session, '5.00', NOW)                                  # today, exactly now
    record(session, '1000.00', datetime(2024, 5, 15, 12, 0, 1))   # after now
    record(session, '20.00', datetime(2024, 5, 14, 23, 59, 59))   # this week
    record(session, '30.00', datetime(2024, 5, 12, 0, 0, 0))      # Sunday midnight
    record(session, '40.00', datetime(2024, 5, 11, 23, 59, 59))   # this month
    record(session, '50.00', datetime(2024, 4, 30, 23, 59, 59))   # last month
    record(session, '15.00', datetime(2024, 5, 15, 8, 0), SaleStatus.PENDING)
    record(session, '25.00', datetime(2024, 5, 15, 9, 0), SaleStatus.CANCELLED)


class TestPeriodStarts:

    def test_start_of_day(self):
        assert report_service.start_of_day(NOW) == datetime(2024, 5, 15)

    def test_start_of_week_sunday(self):
        assert report_service.start_of_week(NOW) == datetime(2024, 5, 12)

    def test_start_of_week_on_sunday_itself(self):
        assert report_service.start_of_week(datetime(2024, 5, 12, 9, 30)) == datetime(2024, 5, 12)

    def test_start_of_week_monday(self):
        assert report_service.start_of_week(NOW, week_start_day=1) == datetime(2024, 5, 13)

    def test_start_of_month(self):
        assert report_service.start_of_month(NOW) == datetime(2024, 5, 1)


class TestPeriodTotals:

    def test_daily_includes_midnight_and_now(self, session, sales):
        assert report_service.get_daily_sales(session, NOW) == Decimal('15.00')

    def test_weekly(self, session, sales):
        assert report_service.get_weekly_sales(session, NOW) == Decimal('65.00')

    def test_weekly_starting_monday(self, session, sales):
        assert report_service.get_weekly_sales(session, NOW, week_start_day=1) == Decimal('35.00')

    def test_monthly(self, session, sales):
        assert report_service.get_monthly_sales(session, NOW) == Decimal('105.00')

    def test_no_sales(self, session):
        assert report_service.get_daily_sales(session, NOW) == Decimal('0.00')


class TestDashboardSummary:

    def test_summary(self, session, product, sales):
        data = report_service.get_dashboard_summary(session, now=NOW)

        assert data['daily_sales'] == Decimal('15.00')
        assert data['weekly_sales'] == Decimal('65.00')
        assert data['monthly_sales'] == Decimal('105.00')
        assert data['sales_count'] == 7
        assert data['product_count'] == 1
        assert data['low_stock_products'] == []
        assert len(data['recent_sales']) == 5
        assert data['recent_sales'][0].total == Decimal('1000.00')
