"""Catalog blueprint - product endpoints."""
from typing import Any, Dict, Tuple
from flask import Blueprint, request, current_app
from pos.database import get_session
from pos.forms.api_forms import ProductForm, ProductUpdateForm, validate_or_raise, submitted_data
from pos.services import product_service

catalog_bp = Blueprint('catalog', __name__, url_prefix='/products')


@catalog_bp.route('', methods=['GET'])
def list_products() -> Dict[str, Any]:
    """List products, optionally filtered by ?q= search term."""
    session = get_session()
    products = product_service.search_products(session, request.args.get('q', ''))
    return {'products': [p.to_dict() for p in products]}


@catalog_bp.route('', methods=['POST'])
def create_product() -> Tuple[Dict[str, Any], int]:
    form = ProductForm()
    validate_or_raise(form)

    session = get_session()
    product = product_service.create_product(session, submitted_data(form))
    return {'product': product.to_dict()}, 201


@catalog_bp.route('/low-stock', methods=['GET'])
def low_stock() -> Dict[str, Any]:
    """Products at or below their minimum stock."""
    session = get_session()
    products = product_service.get_low_stock_products(session)
    return {'products': [p.to_dict() for p in products]}


@catalog_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id: int) -> Dict[str, Any]:
    session = get_session()
    product = product_service.get_product_or_404(session, product_id)
    return {'product': product.to_dict()}


@catalog_bp.route('/<int:product_id>', methods=['PUT', 'PATCH'])
def update_product(product_id: int) -> Dict[str, Any]:
    form = ProductUpdateForm()
    validate_or_raise(form)

    session = get_session()
    product = product_service.update_product(session, product_id, submitted_data(form))
    return {'product': product.to_dict()}


@catalog_bp.route('/<int:product_id>', methods=['DELETE'])
def delete_product(product_id: int) -> Dict[str, Any]:
    session = get_session()
    product_service.delete_product(session, product_id)
    current_app.logger.info(f"Product {product_id} deleted")
    return {'status': 'ok'}
