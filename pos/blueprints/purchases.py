"""Purchases blueprint - supplier purchase orders."""
from typing import Any, Dict, Tuple
from flask import Blueprint, request
from pos.database import get_session
from pos.forms.api_forms import PurchaseForm, PurchaseUpdateForm, validate_or_raise, submitted_data
from pos.services import purchase_service

purchases_bp = Blueprint('purchases', __name__, url_prefix='/purchases')


def _items_from_payload():
    payload = request.get_json(silent=True) or {}
    return payload.get('items')


@purchases_bp.route('', methods=['GET'])
def list_purchases() -> Dict[str, Any]:
    session = get_session()
    return {'purchases': [p.to_dict() for p in purchase_service.list_purchases(session)]}


@purchases_bp.route('', methods=['POST'])
def create_purchase() -> Tuple[Dict[str, Any], int]:
    """Create a purchase; JSON body carries supplier, status and items."""
    form = PurchaseForm()
    validate_or_raise(form)

    session = get_session()
    purchase = purchase_service.create_purchase(session, {
        'supplier': form.supplier.data,
        'status': form.status.data,
        'items': _items_from_payload(),
    })
    return {'purchase': purchase.to_dict()}, 201


@purchases_bp.route('/<int:purchase_id>', methods=['GET'])
def get_purchase(purchase_id: int) -> Dict[str, Any]:
    session = get_session()
    return {'purchase': purchase_service.get_purchase_or_404(session, purchase_id).to_dict()}


@purchases_bp.route('/<int:purchase_id>', methods=['PUT', 'PATCH'])
def update_purchase(purchase_id: int) -> Dict[str, Any]:
    form = PurchaseUpdateForm()
    validate_or_raise(form)

    data = submitted_data(form)
    items = _items_from_payload()
    if items is not None:
        data['items'] = items

    session = get_session()
    purchase = purchase_service.update_purchase(session, purchase_id, data)
    return {'purchase': purchase.to_dict()}


@purchases_bp.route('/<int:purchase_id>', methods=['DELETE'])
def delete_purchase(purchase_id: int) -> Dict[str, Any]:
    session = get_session()
    purchase_service.delete_purchase(session, purchase_id)
    return {'status': 'ok'}
