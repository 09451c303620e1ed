"""
Pytest fixtures for POS backend tests.

Every test gets its own SQLite file so threaded tests can open real
concurrent connections against it.
"""

import pytest
from decimal import Decimal

from pos_api import create_app
from pos_api.extensions import db
from pos_api.models import User, Item, Customer
from pos_api.services.auth_service import hash_password


ADMIN_PASSWORD = "admin123"
CASHIER_PASSWORD = "cashier123"


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing."""
    db_path = tmp_path / "pos_test.sqlite3"
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_path}",
        'BCRYPT_ROUNDS': 4,
        'RATE_LIMIT_ENABLED': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    return db.session


def _make_user(session, username, email, password, role):
    user = User(
        username=username,
        email=email,
        role=role,
        password_hash=hash_password(password, rounds=4),
    )
    session.add(user)
    session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session):
    return _make_user(db_session, "admin", "admin@pos.com", ADMIN_PASSWORD, "admin")


@pytest.fixture(scope='function')
def cashier_user(db_session):
    return _make_user(db_session, "cashier", "cashier@pos.com", CASHIER_PASSWORD, "cashier")


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json['data']['token']
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, "admin", ADMIN_PASSWORD))


@pytest.fixture(scope='function')
def cashier_headers(client, cashier_user):
    return auth_headers(get_auth_token(client, "cashier", CASHIER_PASSWORD))


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory: make_item(name, price, stock, category='General')."""
    def _make(name="Widget", price="10.00", stock=10, category="General", description=None):
        item = Item(
            name=name,
            price=Decimal(price),
            stock_quantity=stock,
            category=category,
            description=description,
        )
        db_session.add(item)
        db_session.commit()
        return item
    return _make


@pytest.fixture(scope='function')
def customer(db_session):
    c = Customer(name="Jane Doe", email="jane@example.com", phone="555-123-4567", address="1 Main St")
    db_session.add(c)
    db_session.commit()
    return c
