"""
Unit tests for supplier purchases.
"""

import pytest
from decimal import Decimal

from pos.exceptions import BusinessLogicError, NotFoundError
from pos.models import PurchaseStatus
from pos.services import purchase_service


ITEMS = [
    {'product_name': 'Coca Cola 600ml', 'quantity': 24, 'price': '12.00'},
    {'product_name': 'Pan Bimbo', 'quantity': 10, 'price': '35.50'},
]


def test_create_computes_total(session):
    purchase = purchase_service.create_purchase(session, {'supplier': 'FEMSA', 'items': ITEMS})

    assert purchase.total == Decimal('643.00')
    assert purchase.status == PurchaseStatus.PENDING
    assert len(purchase.items) == 2


def test_purchase_does_not_touch_stock(session, product):
    purchase_service.create_purchase(session, {
        'supplier': 'FEMSA',
        'status': 'completed',
        'items': [{'product_id': product.id, 'product_name': product.name, 'quantity': 24, 'price': '12.00'}],
    })
    assert product.current_stock == 50


@pytest.mark.parametrize('data', [
    {'supplier': '', 'items': ITEMS},
    {'supplier': 'FEMSA', 'items': []},
    {'supplier': 'FEMSA', 'items': [{'product_name': 'X', 'quantity': 0, 'price': '1'}]},
    {'supplier': 'FEMSA', 'items': [{'product_name': 'X', 'quantity': 1, 'price': '-1'}]},
    {'supplier': 'FEMSA', 'status': 'lost', 'items': ITEMS},
])
def test_create_validation(session, data):
    with pytest.raises(BusinessLogicError):
        purchase_service.create_purchase(session, data)


def test_update_status_keeps_total(session):
    purchase = purchase_service.create_purchase(session, {'supplier': 'FEMSA', 'items': ITEMS})

    updated = purchase_service.update_purchase(session, purchase.id, {'status': 'completed'})
    assert updated.status == PurchaseStatus.COMPLETED
    assert updated.total == Decimal('643.00')

    updated = purchase_service.update_purchase(session, purchase.id, {'items': ITEMS[:1]})
    assert updated.total == Decimal('288.00')


def test_delete(session):
    purchase = purchase_service.create_purchase(session, {'supplier': 'FEMSA', 'items': ITEMS})
    purchase_id = purchase.id
    purchase_service.delete_purchase(session, purchase_id)

    with pytest.raises(NotFoundError):
        purchase_service.get_purchase_or_404(session, purchase_id)
