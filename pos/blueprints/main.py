"""Main blueprint - health check and CSRF token."""
from typing import Any, Dict
from flask import Blueprint
from flask_wtf.csrf import generate_csrf
from pos.services.cart_service import get_cart

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index() -> Dict[str, Any]:
    return {'status': 'ok', 'cart_state': get_cart().state.value}


@main_bp.route('/csrf-token')
def csrf_token() -> Dict[str, Any]:
    """Token to send back in the X-CSRFToken header of write requests."""
    return {'csrf_token': generate_csrf()}
