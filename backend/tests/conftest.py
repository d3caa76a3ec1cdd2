"""
Pytest fixtures for posadmin backend tests.

Provides an in-memory database, a test client, users with bearer tokens,
and catalog/order factories.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.pool import StaticPool

from posadmin import create_app
from posadmin.extensions import db
from posadmin.models import Category, Order, OrderItem, Product, User
from posadmin.money import line_total, to_money
from posadmin.services import session_service
from posadmin.services.auth_service import create_user


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'poolclass': StaticPool,
            'connect_args': {'check_same_thread': False},
        },
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table before each test."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='function')
def cashier(db_session):
    """Active user who places orders."""
    return create_user(name="Rudi", email="rudi@example.com", password="secret123")


@pytest.fixture(scope='function')
def token(cashier):
    _, plaintext = session_service.create_session(user_id=cashier.id)
    return plaintext


@pytest.fixture(scope='function')
def headers(token):
    return auth_headers(token)


@pytest.fixture(scope='function')
def category(db_session):
    category = Category(name="Food")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def product_factory(db_session, category):
    def _create(price="100.00", name=None, stock=10) -> Product:
        product = Product(
            name=name or f"Product {price}",
            category_id=category.id,
            price=Decimal(str(price)),
            stock=stock,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _create


@pytest.fixture(scope='function')
def product_a(product_factory):
    return product_factory(price="100.00", name="Nasi Goreng")


@pytest.fixture(scope='function')
def product_b(product_factory):
    return product_factory(price="50.00", name="Es Teh", stock=5)


@pytest.fixture(scope='function')
def order_record(db_session):
    """
    Insert an order row directly, bypassing intake, with explicit timestamps.

    items: list of (product, quantity) or (product, quantity, item_created_at).
    """
    counter = {"n": 0}

    def _create(*, created_at: datetime, items, cashier_id=None, total=None, payment_method="cash") -> Order:
        counter["n"] += 1
        order = Order(
            cashier_id=cashier_id,
            transaction_number=f"TRX-TEST{counter['n']:04d}",
            total=Decimal("0"),
            total_quantity=0,
            payment_method=payment_method,
            created_at=created_at,
            updated_at=created_at,
        )
        computed_total = Decimal("0.00")
        for entry in items:
            product, quantity = entry[0], entry[1]
            item_created_at = entry[2] if len(entry) > 2 else created_at
            amount = line_total(product.price, quantity)
            computed_total += amount
            order.order_items.append(OrderItem(
                product_id=product.id,
                quantity=quantity,
                product_price=product.price,
                total_item=amount,
                created_at=item_created_at,
                updated_at=item_created_at,
            ))
            order.total_quantity += quantity
        order.total = to_money(total if total is not None else computed_total)
        db_session.add(order)
        db_session.commit()
        return order

    return _create


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def count_rows(db_session):
    """Row count for a model."""
    def _count(model) -> int:
        return db_session.query(model).count()
    return _count


@pytest.fixture(scope='function')
def make_user(db_session):
    def _create(email: str, password: str = "secret123", name: str = "User") -> User:
        return create_user(name=name, email=email, password=password)
    return _create
