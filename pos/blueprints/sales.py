"""Sales blueprint - POS cart, checkout, history and receipts."""
from typing import Any, Dict, Tuple
from flask import Blueprint, Response, current_app, request
from pos.database import get_session
from pos.exceptions import BusinessLogicError
from pos.forms.api_forms import CartItemForm, CartLineForm, CheckoutForm, validate_or_raise, submitted_data
from pos.models import SaleStatus
from pos.services import sales_service, setting_service
from pos.services.cart_service import get_cart
from pos.services.receipt_service import render_receipt
from pos.blueprints.metrics import record_sale_metrics
from pos.utils.number_format import to_money

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')

CASH_PAYMENT = 'efectivo'


def _cart_response(status_code: int = 200) -> Tuple[Dict[str, Any], int]:
    return {'cart': get_cart().to_dict()}, status_code


def _receipt_for(sale, payment_info=None) -> str:
    session = get_session()
    return render_receipt(
        sale,
        setting_service.get_section(session, 'business_info'),
        setting_service.get_section(session, 'receipt_settings'),
        payment_info,
    )


# ----------------------------------------------------------------------
# Cart
# ----------------------------------------------------------------------

@sales_bp.route('/cart', methods=['GET'])
def view_cart() -> Tuple[Dict[str, Any], int]:
    return _cart_response()


@sales_bp.route('/cart', methods=['DELETE'])
def clear_cart() -> Tuple[Dict[str, Any], int]:
    """Cancel the sale in progress and release its stock."""
    get_cart().clear()
    return _cart_response()


@sales_bp.route('/cart/items', methods=['POST'])
def add_cart_item() -> Tuple[Dict[str, Any], int]:
    form = CartItemForm()
    validate_or_raise(form)

    get_cart().add_item(form.product_id.data, form.quantity.data or 1)
    return _cart_response(201)


@sales_bp.route('/cart/items/<int:product_id>', methods=['PATCH', 'PUT'])
def update_cart_item(product_id: int) -> Tuple[Dict[str, Any], int]:
    """Change quantity and/or override the charged unit price of a line."""
    form = CartLineForm()
    validate_or_raise(form)
    data = submitted_data(form)
    if data.get('quantity') is None and data.get('price') is None:
        raise BusinessLogicError('Indique la cantidad o el precio')

    cart = get_cart()
    if data.get('quantity') is not None:
        cart.update_quantity(product_id, data['quantity'])
    if data.get('price') is not None:
        cart.override_price(product_id, data['price'])
    return _cart_response()


@sales_bp.route('/cart/items/<int:product_id>', methods=['DELETE'])
def remove_cart_item(product_id: int) -> Tuple[Dict[str, Any], int]:
    get_cart().remove_item(product_id)
    return _cart_response()


@sales_bp.route('/checkout', methods=['POST'])
def checkout() -> Tuple[Dict[str, Any], int]:
    """
    Finalize the cart.

    Cash payments must cover the total; the change is returned with the sale
    together with the ticket text.
    """
    form = CheckoutForm()
    validate_or_raise(form)

    cart = get_cart()
    payment_method = form.payment_method.data
    payment_info = None

    if payment_method == CASH_PAYMENT and not cart.is_empty():
        total = cart.compute_totals().total
        cash_received = form.cash_received.data
        if cash_received is None or to_money(cash_received) < total:
            raise BusinessLogicError(
                'El efectivo recibido no cubre el total de la venta',
                payload={'total': str(total)}
            )
        cash_received = to_money(cash_received)
        payment_info = {'cash_received': cash_received, 'change': cash_received - total}

    sale = cart.checkout(payment_method, form.customer_id.data)
    record_sale_metrics(sale)
    current_app.logger.info(f"Sale #{sale.id} completed: total={sale.total} payment={payment_method}")

    response = {
        'sale': sale.to_dict(),
        'receipt': _receipt_for(sale, payment_info),
    }
    if payment_info:
        response['payment'] = {k: str(v) for k, v in payment_info.items()}
    return response, 201


# ----------------------------------------------------------------------
# Ledger
# ----------------------------------------------------------------------

@sales_bp.route('', methods=['GET'])
def list_sales() -> Dict[str, Any]:
    """Sale history; ?status=completed|pending|cancelled filters."""
    session = get_session()
    status = request.args.get('status')
    try:
        status = SaleStatus(status) if status else None
    except ValueError:
        raise BusinessLogicError(f'Estado de venta inválido: {status}')
    sales = sales_service.get_sale_history(session, status=status)
    return {'sales': [s.to_dict() for s in sales]}


@sales_bp.route('/<int:sale_id>', methods=['GET'])
def get_sale(sale_id: int) -> Dict[str, Any]:
    session = get_session()
    return {'sale': sales_service.get_sale_or_404(session, sale_id).to_dict()}


@sales_bp.route('/<int:sale_id>', methods=['DELETE'])
def delete_sale(sale_id: int) -> Dict[str, Any]:
    """Delete a sale and return its units to stock."""
    result = get_cart().delete_sale(sale_id)
    current_app.logger.info(f"Sale #{sale_id} deleted, stock restored for {len(result['restored'])} lines")
    return {'status': 'ok', **result}


@sales_bp.route('/<int:sale_id>/receipt', methods=['GET'])
def sale_receipt(sale_id: int) -> Response:
    """Ticket text of a stored sale."""
    session = get_session()
    sale = sales_service.get_sale_or_404(session, sale_id)
    return Response(_receipt_for(sale), mimetype='text/plain')
