"""
Pytest fixtures for Kasir backend tests.

Provides the application with an in-memory database, per-test table
clearing, factory fixtures for users and products, and auth helpers.
"""

import pytest

from kasir import create_app
from kasir.extensions import db
from kasir.models import Product, User
from kasir.services.auth_service import hash_password


TEST_PASSWORD = "Password123!"

TEST_CONFIG = {
    "TESTING": True,
    "SECRET_KEY": "test",
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SQLALCHEMY_TRACK_MODIFICATIONS": False,
    "BCRYPT_ROUNDS": 4,
    "REPORTING_TIMEZONE": "UTC",
    "S3_ENDPOINT": "http://localhost:9000",
    "S3_ACCESS_KEY": "test-access",
    "S3_SECRET_KEY": "test-secret",
    "S3_BUCKET": "kasir-test",
    "S3_REGION": "us-east-1",
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(dict(TEST_CONFIG))

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh data for each test, schema kept."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expire_all()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: make_user("alice") -> committed User with TEST_PASSWORD."""
    def _make(username: str, name: str | None = None, is_active: bool = True) -> User:
        user = User(
            username=username,
            email=f"{username}@kasir.test",
            name=name,
            password_hash=hash_password(TEST_PASSWORD),
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: make_product(owner, name=..., unit_price=..., ...) -> committed Product."""
    def _make(
        owner: User | None,
        name: str = "Kopi Susu",
        unit_price: int = 1000,
        unit_cost: int | None = 600,
        stock_quantity: int = 5,
        category: str = "Drinks",
        is_active: bool = True,
    ) -> Product:
        product = Product(
            name=name,
            unit_price=unit_price,
            unit_cost=unit_cost,
            stock_quantity=stock_quantity,
            category=category,
            owner_id=owner.id if owner is not None else None,
            is_active=is_active,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def cashier(make_user):
    return make_user("cashier", name="Siti")


@pytest.fixture(scope='function')
def other_cashier(make_user):
    return make_user("other")


def get_auth_token(client, username: str, password: str = TEST_PASSWORD) -> str | None:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def cashier_headers(client, cashier):
    return auth_headers(get_auth_token(client, cashier.username))


@pytest.fixture(scope='function')
def other_headers(client, other_cashier):
    return auth_headers(get_auth_token(client, other_cashier.username))
