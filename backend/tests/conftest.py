"""
Pytest fixtures for glass shop backend tests.

Provides the app on in-memory SQLite, per-test table wipes, two shops
(tenants) with admins and staff, and login helpers.
"""

import pytest

from glassshop import create_app
from glassshop.config import TestConfig
from glassshop.extensions import db
from glassshop.models import Customer
from glassshop.services import auth_service, price_master_service


PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh data for each test; schema is kept."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def shop_a(db_session):
    """Shop A with its admin (intra-state: Maharashtra)."""
    shop, _ = auth_service.register_shop(
        username="admin_a", password=PASSWORD, shop_name="Shop A Glass", state="Maharashtra",
    )
    return shop


@pytest.fixture(scope='function')
def shop_b(db_session):
    shop, _ = auth_service.register_shop(
        username="admin_b", password=PASSWORD, shop_name="Shop B Glass", state="Gujarat",
    )
    return shop


@pytest.fixture(scope='function')
def admin_a(shop_a):
    return auth_service.get_user_by_username("admin_a")


@pytest.fixture(scope='function')
def admin_b(shop_b):
    return auth_service.get_user_by_username("admin_b")


@pytest.fixture(scope='function')
def staff_a(admin_a):
    return auth_service.create_staff(admin=admin_a, username="staff_a", password=PASSWORD)


@pytest.fixture(scope='function')
def customer_a(db_session, shop_a):
    customer = Customer(
        shop_id=shop_a.id,
        name="Ravi Kumar",
        mobile="9800000001",
        address="12 MG Road, Pune",
        gstin="27ABCDE1234F1Z5",
        state="Maharashtra",
    )
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def customer_b(db_session, shop_b):
    customer = Customer(shop_id=shop_b.id, name="Beta Customer", mobile="9800000002")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def priced_clear_5mm(shop_a):
    """Shop A prices CLEAR 5mm."""
    return price_master_service.create_entry(shop_a.id, {
        "glass_type": "CLEAR", "thickness": 5, "purchase_price": 40, "selling_price": 55,
    })


@pytest.fixture(scope='function')
def admin_a_headers(client, admin_a):
    return auth_headers(get_auth_token(client, "admin_a", PASSWORD))


@pytest.fixture(scope='function')
def admin_b_headers(client, admin_b):
    return auth_headers(get_auth_token(client, "admin_b", PASSWORD))


@pytest.fixture(scope='function')
def staff_a_headers(client, staff_a):
    return auth_headers(get_auth_token(client, "staff_a", PASSWORD))


def sample_item(**overrides) -> dict:
    item = {
        "glass_type": "CLEAR",
        "thickness": "5",
        "height": 4,
        "width": 3,
        "quantity": 2,
        "rate_per_sqft": 50,
        "area": 12,
        "subtotal": 600,
    }
    item.update(overrides)
    return item


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
