"""
Prometheus metrics for the register.

Request latency/count per endpoint plus sale counters, served at /metrics.
Keep /metrics off the public network.
"""
import time
from flask import Blueprint, Response, g, request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

metrics_bp = Blueprint('metrics', __name__)

http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'http_status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

sales_completed_total = Counter(
    'pos_sales_completed_total',
    'Completed sales by payment method',
    ['payment_method']
)

sales_amount_total = Counter(
    'pos_sales_amount_total',
    'Sum of completed sale totals'
)


def record_sale_metrics(sale) -> None:
    """Count a completed sale and its amount."""
    sales_completed_total.labels(payment_method=sale.payment_method).inc()
    sales_amount_total.inc(float(sale.total))


def setup_metrics_instrumentation(app):
    """Time every request and count it by endpoint and status."""

    @app.before_request
    def start_timer():
        g._metrics_started = time.perf_counter()

    @app.after_request
    def observe_request(response):
        started = g.pop('_metrics_started', None)
        if started is not None:
            endpoint = request.endpoint or 'unknown'
            http_request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(time.perf_counter() - started)
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, http_status=response.status_code
            ).inc()
        return response


@metrics_bp.route('/metrics')
def metrics():
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
