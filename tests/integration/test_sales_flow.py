"""
Integration tests for the register flow: cart -> checkout -> receipt -> delete.
"""
import pytest


def stock_of(client, product_id):
    return client.get(f'/products/{product_id}').get_json()['product']['current_stock']


@pytest.fixture
def soda(create_product_api):
    return create_product_api('Refresco', '10.00', current_stock=50)


@pytest.fixture
def cheese(create_product_api):
    return create_product_api('Queso', '85.00', current_stock=10)


def test_full_sale_cycle(client, soda):
    response = client.post('/sales/cart/items', json={'product_id': soda, 'quantity': 3})
    assert response.status_code == 201
    assert response.get_json()['cart']['state'] == 'building'
    assert stock_of(client, soda) == 47

    response = client.patch(f'/sales/cart/items/{soda}', json={'quantity': 5})
    assert response.status_code == 200
    assert stock_of(client, soda) == 45

    response = client.patch(f'/sales/cart/items/{soda}', json={'price': '8.00'})
    item = response.get_json()['cart']['items'][0]
    assert item['price'] == '8.00'
    assert item['price_overridden'] is True
    assert response.get_json()['cart']['total'] == '40.00'

    response = client.post('/sales/checkout', json={'payment_method': 'efectivo', 'cash_received': '100'})
    assert response.status_code == 201
    data = response.get_json()
    sale_id = data['sale']['id']
    assert data['sale']['total'] == '40.00'
    assert data['sale']['items'][0]['quantity'] == 5
    assert data['payment'] == {'cash_received': '100.00', 'change': '60.00'}
    assert f'Ticket #: {sale_id}' in data['receipt']
    assert 'Cambio:' in data['receipt']

    # Checkout consumes the reservation and empties the cart
    assert stock_of(client, soda) == 45
    assert client.get('/sales/cart').get_json()['cart']['items'] == []

    sales = client.get('/sales').get_json()['sales']
    assert [s['id'] for s in sales] == [sale_id]

    response = client.get(f'/sales/{sale_id}/receipt')
    assert response.status_code == 200
    assert response.mimetype == 'text/plain'
    assert 'Refresco' in response.get_data(as_text=True)

    response = client.delete(f'/sales/{sale_id}')
    assert response.status_code == 200
    assert response.get_json()['restored'] == [{'product_id': soda, 'quantity': 5}]
    assert stock_of(client, soda) == 50
    assert client.get(f'/sales/{sale_id}').status_code == 404


def test_clear_cart_releases_stock(client, soda, cheese):
    client.post('/sales/cart/items', json={'product_id': soda, 'quantity': 4})
    client.post('/sales/cart/items', json={'product_id': cheese})
    assert stock_of(client, cheese) == 9

    response = client.delete('/sales/cart')
    assert response.get_json()['cart']['state'] == 'empty'
    assert stock_of(client, soda) == 50
    assert stock_of(client, cheese) == 10


def test_remove_item_and_zero_quantity(client, soda, cheese):
    client.post('/sales/cart/items', json={'product_id': soda, 'quantity': 4})
    client.post('/sales/cart/items', json={'product_id': cheese, 'quantity': 2})

    client.delete(f'/sales/cart/items/{soda}')
    response = client.patch(f'/sales/cart/items/{cheese}', json={'quantity': 0})

    assert response.get_json()['cart']['items'] == []
    assert stock_of(client, soda) == 50
    assert stock_of(client, cheese) == 10


def test_cart_line_update_needs_a_value(client, soda):
    client.post('/sales/cart/items', json={'product_id': soda})
    response = client.patch(f'/sales/cart/items/{soda}', json={})
    assert response.status_code == 400


def test_checkout_with_tax(client, cheese):
    client.put('/settings/receipt_settings', json={'enable_tax': True})
    client.post('/sales/cart/items', json={'product_id': cheese})

    response = client.post('/sales/checkout', json={'payment_method': 'tarjeta'})
    assert response.status_code == 201
    sale = response.get_json()['sale']
    assert sale['subtotal'] == '85.00'
    assert sale['tax'] == '13.60'
    assert sale['total'] == '98.60'
    assert 'IVA:' in response.get_json()['receipt']


def test_wholesale_price_from_settings(client, soda):
    client.put('/settings/wholesale_settings', json={
        'enabled': True, 'min_quantity_type': 'perItem', 'min_quantity': 10, 'discount_percentage': 10,
    })

    response = client.post('/sales/cart/items', json={'product_id': soda, 'quantity': 9})
    assert response.get_json()['cart']['items'][0]['price'] == '10.00'

    response = client.post('/sales/cart/items', json={'product_id': soda, 'quantity': 1})
    cart = response.get_json()['cart']
    assert cart['items'][0]['price'] == '9.00'
    assert cart['subtotal'] == '90.00'
    assert cart['discount'] == '10.00'


def test_insufficient_cash_keeps_cart(client, cheese):
    client.post('/sales/cart/items', json={'product_id': cheese})

    response = client.post('/sales/checkout', json={'payment_method': 'efectivo', 'cash_received': '50'})
    assert response.status_code == 400
    assert response.get_json()['total'] == '85.00'
    assert len(client.get('/sales/cart').get_json()['cart']['items']) == 1
    assert client.get('/sales').get_json()['sales'] == []


def test_checkout_empty_cart(client):
    response = client.post('/sales/checkout', json={'payment_method': 'tarjeta'})
    assert response.status_code == 400
    assert response.get_json()['status'] == 'error'


def test_checkout_invalid_payment_method(client, soda):
    client.post('/sales/cart/items', json={'product_id': soda})
    response = client.post('/sales/checkout', json={'payment_method': 'bitcoin'})
    assert response.status_code == 400
    assert 'payment_method' in response.get_json()['errors']


def test_checkout_with_customer(client, soda):
    customer = client.post('/customers', json={'name': 'María López'}).get_json()['customer']
    client.post('/sales/cart/items', json={'product_id': soda})

    response = client.post('/sales/checkout', json={'payment_method': 'transferencia', 'customer_id': 999})
    assert response.status_code == 404
    assert client.get('/sales/cart').get_json()['cart']['state'] == 'building'

    response = client.post('/sales/checkout', json={'payment_method': 'transferencia',
                                                    'customer_id': customer['id']})
    assert response.status_code == 201
    assert response.get_json()['sale']['customer_id'] == customer['id']


def test_unknown_product(client):
    response = client.post('/sales/cart/items', json={'product_id': 999})
    assert response.status_code == 404


def test_invalid_quantity(client, soda):
    response = client.post('/sales/cart/items', json={'product_id': soda, 'quantity': 0})
    assert response.status_code == 400
    assert stock_of(client, soda) == 50


def test_negative_stock_policy(app, client, cheese):
    app.extensions['pos_cart'].allow_negative_stock = False

    response = client.post('/sales/cart/items', json={'product_id': cheese, 'quantity': 11})
    assert response.status_code == 409
    assert response.get_json()['available'] == 10
    assert stock_of(client, cheese) == 10


def test_sales_filter_by_status(client, soda):
    client.post('/sales/cart/items', json={'product_id': soda})
    client.post('/sales/checkout', json={'payment_method': 'tarjeta'})

    assert len(client.get('/sales?status=completed').get_json()['sales']) == 1
    assert client.get('/sales?status=pending').get_json()['sales'] == []
    assert client.get('/sales?status=lost').status_code == 400


def test_report_summary_after_sale(client, soda):
    client.post('/sales/cart/items', json={'product_id': soda, 'quantity': 2})
    client.post('/sales/checkout', json={'payment_method': 'tarjeta'})

    data = client.get('/reports/summary').get_json()
    assert data['daily_sales'] == '20.00'
    assert data['monthly_sales'] == '20.00'
    assert data['sales_count'] == 1
    assert data['products_sold'] == 2
    assert len(data['recent_sales']) == 1

    assert client.get('/reports/summary?now=yesterday').status_code == 400
