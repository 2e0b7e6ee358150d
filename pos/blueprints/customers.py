"""Customers blueprint."""
from typing import Any, Dict, Tuple
from flask import Blueprint, request
from pos.database import get_session
from pos.forms.api_forms import CustomerForm, CustomerUpdateForm, validate_or_raise, submitted_data
from pos.services import customer_service

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


@customers_bp.route('', methods=['GET'])
def list_customers() -> Dict[str, Any]:
    """List customers; ?q= filters by name, tax id or email."""
    session = get_session()
    customers = customer_service.search_customers(session, request.args.get('q', ''))
    return {'customers': [c.to_dict() for c in customers]}


@customers_bp.route('', methods=['POST'])
def create_customer() -> Tuple[Dict[str, Any], int]:
    form = CustomerForm()
    validate_or_raise(form)

    session = get_session()
    customer = customer_service.create_customer(session, submitted_data(form))
    return {'customer': customer.to_dict()}, 201


@customers_bp.route('/default', methods=['GET'])
def default_customer() -> Dict[str, Any]:
    """The walk-in customer used when none is selected."""
    session = get_session()
    return {'customer': customer_service.get_or_create_default_customer(session).to_dict()}


@customers_bp.route('/<int:customer_id>', methods=['GET'])
def get_customer(customer_id: int) -> Dict[str, Any]:
    session = get_session()
    return {'customer': customer_service.get_customer_or_404(session, customer_id).to_dict()}


@customers_bp.route('/<int:customer_id>', methods=['PUT', 'PATCH'])
def update_customer(customer_id: int) -> Dict[str, Any]:
    form = CustomerUpdateForm()
    validate_or_raise(form)

    session = get_session()
    customer = customer_service.update_customer(session, customer_id, submitted_data(form))
    return {'customer': customer.to_dict()}


@customers_bp.route('/<int:customer_id>', methods=['DELETE'])
def delete_customer(customer_id: int) -> Dict[str, Any]:
    session = get_session()
    customer_service.delete_customer(session, customer_id)
    return {'status': 'ok'}
