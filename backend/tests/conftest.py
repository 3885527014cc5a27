"""
Pytest fixtures for depot backend tests.

Provides the app on an in-memory database, a per-test table wipe, the
test client and small factories that go through the real services.
"""

import pytest

from depot import create_app
from depot.extensions import db
from depot.schemas import (
    CreateCustomerRequest,
    CreateItemRequest,
    CreateOrderRequest,
    OrderLineInput,
    RecordPaymentRequest,
)
from depot.services import customer_service, inventory_service, order_service, payment_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'TXN_RETRY_BACKOFF': 0,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh tables for each test."""
    with app.app_context():
        # Clear all data but keep schema
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture(scope='function')
def client(app, db_session):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app, db_session):
    return app.test_cli_runner()


@pytest.fixture
def make_customer(db_session):
    def _make(name="Chioma Okonkwo", old_balance_cents=0, **overrides):
        fields = dict(
            name=name,
            phone="08030000000",
            street="12 Market Road",
            city="Lagos",
            state="Lagos",
            customer_type="RETAIL",
            old_balance_cents=old_balance_cents,
        )
        fields.update(overrides)
        return customer_service.create_customer(CreateCustomerRequest(**fields))
    return _make


@pytest.fixture
def make_item(db_session):
    def _make(item_name="Long Grain Rice", quantity=100, unit_price_cents=1000, **overrides):
        fields = dict(
            item_name=item_name,
            brand="Royal Stallion",
            category="RICE",
            unit="BAG",
            unit_price_cents=unit_price_cents,
            location="Warehouse A-01",
            supplier_name="Royal Distribution",
            supplier_contact="08011111111",
            quantity=quantity,
            reorder_level=10,
        )
        fields.update(overrides)
        return inventory_service.create_item(CreateItemRequest(**fields))
    return _make


@pytest.fixture
def make_order(db_session):
    """Create an order from (item, quantity) pairs."""
    def _make(customer, *lines, **overrides):
        return order_service.create_order(CreateOrderRequest(
            customer_id=customer.id,
            lines=tuple(OrderLineInput(inventory_item_id=item.id, quantity=qty) for item, qty in lines),
            **overrides,
        ))
    return _make


@pytest.fixture
def pay(db_session):
    def _pay(customer, amount_cents, order=None, payment_method="CASH", **overrides):
        return payment_service.record_payment(RecordPaymentRequest(
            customer_id=customer.id,
            amount_cents=amount_cents,
            payment_method=payment_method,
            order_id=order.id if order is not None else None,
            **overrides,
        ))
    return _pay
