import pytest

from depot.extensions import db
from depot.models import InventoryItem, Order, OrderLine, Payment
from depot.schemas import CreateOrderRequest, OrderLineInput, UpdateOrderRequest
from depot.services import inventory_service, order_service
from depot.services.errors import CustomerNotFoundError, InsufficientStockError, ItemNotFoundError, OrderNotFoundError
from depot.validation import ValidationError


def test_create_order_snapshots_lines_and_deducts_stock(make_customer, make_item, make_order):
    customer = make_customer()
    rice = make_item(quantity=50, unit_price_cents=4000)
    oil = make_item(item_name="Vegetable Oil", quantity=20, unit_price_cents=2500, category="OIL", unit="GALLON")

    order = make_order(customer, (rice, 3), (oil, 2))

    assert order.order_number.startswith("ORD-")
    assert order.subtotal_cents == 3 * 4000 + 2 * 2500
    assert order.total_cents == order.subtotal_cents
    assert order.amount_paid_cents == 0
    assert order.balance_cents == order.total_cents
    assert order.payment_status == "UNPAID"
    assert [(l.item_name, l.quantity, l.line_total_cents) for l in order.lines] == [
        ("Long Grain Rice", 3, 12000),
        ("Vegetable Oil", 2, 5000),
    ]

    db.session.refresh(rice)
    db.session.refresh(oil)
    assert rice.quantity == 47
    assert oil.quantity == 18

    db.session.refresh(customer)
    assert customer.total_orders == 1
    assert customer.total_purchases_cents == order.total_cents
    assert customer.last_order_date is not None


def test_create_order_applies_discount_and_counter_payment(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item(unit_price_cents=1000)

    order = make_order(customer, (item, 5), discount_cents=500, amount_paid_cents=1500)

    assert order.total_cents == 4500
    assert order.amount_paid_cents == 1500
    assert order.balance_cents == 3000
    assert order.payment_status == "PARTIAL"
    # Paid at the counter, no payment row and no wallet movement
    assert db.session.query(Payment).count() == 0
    db.session.refresh(customer)
    assert customer.balance_cents == 0


def test_line_price_override(make_customer, make_item):
    customer = make_customer()
    item = make_item(unit_price_cents=1000)

    order = order_service.create_order(CreateOrderRequest(
        customer_id=customer.id,
        lines=(OrderLineInput(inventory_item_id=item.id, quantity=2, unit_price_cents=900),),
    ))

    assert order.lines[0].unit_price_cents == 900
    assert order.total_cents == 1800


def test_insufficient_stock_rejects_order_and_leaves_state_untouched(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item(quantity=3)

    with pytest.raises(InsufficientStockError) as excinfo:
        make_order(customer, (item, 5))

    assert "Available: 3, Requested: 5" in str(excinfo.value)
    assert excinfo.value.status_code == 400
    db.session.refresh(item)
    assert item.quantity == 3
    assert db.session.query(Order).count() == 0
    db.session.refresh(customer)
    assert customer.total_orders == 0


def test_repeated_item_lines_are_checked_against_summed_quantity(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item(quantity=5)

    with pytest.raises(InsufficientStockError):
        make_order(customer, (item, 3), (item, 3))

    db.session.refresh(item)
    assert item.quantity == 5

    order = make_order(customer, (item, 2), (item, 3))
    assert len(order.lines) == 2
    db.session.refresh(item)
    assert item.quantity == 0
    assert item.stock_status == "OUT_OF_STOCK"


def test_create_order_validation(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item(unit_price_cents=1000)

    with pytest.raises(ValidationError):
        order_service.create_order(CreateOrderRequest(customer_id=customer.id, lines=()))
    with pytest.raises(ValidationError):
        make_order(customer, (item, 1), discount_cents=2000)
    with pytest.raises(ValidationError):
        make_order(customer, (item, 1), amount_paid_cents=1001)
    with pytest.raises(CustomerNotFoundError):
        order_service.create_order(CreateOrderRequest(
            customer_id=9999,
            lines=(OrderLineInput(inventory_item_id=item.id, quantity=1),),
        ))
    with pytest.raises(ItemNotFoundError):
        order_service.create_order(CreateOrderRequest(
            customer_id=customer.id,
            lines=(OrderLineInput(inventory_item_id=9999, quantity=1),),
        ))

    assert db.session.query(Order).count() == 0


def test_rejected_order_does_not_consume_document_number(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item(unit_price_cents=1000, quantity=1)

    with pytest.raises(InsufficientStockError):
        make_order(customer, (item, 2))

    order = make_order(customer, (item, 1))
    assert order.order_number.endswith("-00001")


def test_delete_order_reverses_stock_payments_and_counters(make_customer, make_item, make_order, pay):
    customer = make_customer(old_balance_cents=500)
    item = make_item(quantity=10, unit_price_cents=1000)
    keep = make_order(customer, (item, 1))
    order = make_order(customer, (item, 4))
    pay(customer, 3000, order=order)
    pay(customer, 200)

    result = order_service.delete_order(order.id)

    assert result == {
        "order_id": order.id,
        "restored_item_count": 1,
        "deleted_payment_count": 1,
        "deleted_payment_total_cents": 3000,
    }
    db.session.refresh(item)
    assert item.quantity == 9
    assert db.session.query(OrderLine).filter_by(order_id=order.id).count() == 0
    assert db.session.query(Payment).count() == 1

    db.session.refresh(customer)
    assert customer.total_orders == 1
    assert customer.total_purchases_cents == keep.total_cents
    # 200 paid against 500 old balance + 800 open on the kept order
    assert customer.balance_cents == 0

    with pytest.raises(OrderNotFoundError):
        order_service.delete_order(order.id)


def test_create_then_delete_twice_restores_original_stock(make_customer, make_item, make_order, pay):
    customer = make_customer()
    item = make_item(quantity=10, unit_price_cents=1000)

    for _ in range(2):
        order = make_order(customer, (item, 4))
        pay(customer, 1500, order=order)
        db.session.refresh(item)
        assert item.quantity == 6

        order_service.delete_order(order.id)

        db.session.refresh(item)
        db.session.refresh(customer)
        assert item.quantity == 10
        assert customer.total_orders == 0
        assert customer.total_purchases_cents == 0
        assert customer.balance_cents == 0
        assert db.session.query(Order).count() == 0
        assert db.session.query(Payment).count() == 0


def test_delete_order_survives_deleted_inventory_item(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item(quantity=10)
    order = make_order(customer, (item, 2))

    inventory_service.delete_item(item.id)
    db.session.refresh(order)
    assert order.lines[0].inventory_item_id is None
    assert order.lines[0].item_name == "Long Grain Rice"

    result = order_service.delete_order(order.id)
    assert result["restored_item_count"] == 0
    assert db.session.query(InventoryItem).count() == 0


def test_update_order_status_only_touches_allowed_fields(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item()
    order = make_order(customer, (item, 1))
    total = order.total_cents

    req = UpdateOrderRequest.from_payload({"status": "processing", "delivery_status": "IN_TRANSIT"})
    updated = order_service.update_order_status(order.id, req)

    assert updated.status == "PROCESSING"
    assert updated.delivery_status == "IN_TRANSIT"
    assert updated.total_cents == total

    with pytest.raises(ValidationError) as excinfo:
        UpdateOrderRequest.from_payload({"total_cents": 1, "notes": "x"})
    assert excinfo.value.details["rejected_fields"] == ["total_cents"]


def test_list_orders_filters_and_stats(make_customer, make_item, make_order):
    alice = make_customer(name="Alice")
    bob = make_customer(name="Bob")
    item = make_item(unit_price_cents=1000)
    first = make_order(alice, (item, 1))
    second = make_order(alice, (item, 2), amount_paid_cents=2000)
    make_order(bob, (item, 3))

    orders = order_service.list_orders(customer_id=alice.id)
    assert [o.id for o in orders] == [second.id, first.id]

    unpaid = order_service.list_orders(payment_status="UNPAID")
    assert len(unpaid) == 2

    stats = order_service.order_stats(orders)
    assert stats == {
        "total_orders": 2,
        "total_revenue_cents": 3000,
        "total_outstanding_cents": 1000,
        "pending_count": 2,
    }
