import pytest
from decimal import Decimal

from pos import create_app
from pos.database import get_session
from pos.services import product_service


@pytest.fixture(scope='function')
def app():
    """Create application instance for testing (fresh in-memory database)."""
    app = create_app('config.TestingConfig')
    yield app
    get_session().remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def product(session):
    """Create a product with stock 50 at 18.50."""
    return product_service.create_product(session, {
        'name': 'Coca Cola 600ml',
        'barcode': '7501055300075',
        'category': 'Bebidas',
        'purchase_price': Decimal('12.00'),
        'selling_price': Decimal('18.50'),
        'current_stock': 50,
        'min_stock': 5,
    })


@pytest.fixture(scope='function')
def create_product_api(client):
    """Create products through the HTTP API and return their ids."""
    def _create(name, selling_price, current_stock=50, **extra):
        response = client.post('/products', json={
            'name': name,
            'selling_price': str(selling_price),
            'current_stock': current_stock,
            **extra,
        })
        assert response.status_code == 201, response.get_json()
        return response.get_json()['product']['id']
    return _create
