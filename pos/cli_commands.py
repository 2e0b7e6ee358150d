"""
Flask CLI commands for POS maintenance.

Commands:
- flask init-db: Create the database tables
- flask low-stock: List products at or below minimum stock
- flask sales-report: Print daily/weekly/monthly sales totals
"""

import click
from flask import current_app
from pos.database import create_all, get_session
from pos.services import product_service, report_service


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables in the configured database."""
        create_all()
        click.echo(click.style('✅ Base de datos inicializada', fg='green'))

    @app.cli.command('low-stock')
    def low_stock_command():
        """List products whose stock is at or below the minimum."""
        products = product_service.get_low_stock_products(get_session())
        if not products:
            click.echo('Sin productos con stock bajo.')
            return

        for product in products:
            color = 'red' if product.current_stock <= 0 else 'yellow'
            click.echo(click.style(
                f'{product.name:<30} stock={product.current_stock:>5}  mínimo={product.min_stock:>5}',
                fg=color
            ))

    @app.cli.command('sales-report')
    def sales_report_command():
        """Print completed sales totals for today, this week and this month."""
        session = get_session()
        week_start_day = current_app.config.get('WEEK_START_DAY', report_service.SUNDAY)
        click.echo(f'Hoy:    {report_service.get_daily_sales(session)}')
        click.echo(f'Semana: {report_service.get_weekly_sales(session, week_start_day=week_start_day)}')
        click.echo(f'Mes:    {report_service.get_monthly_sales(session)}')
