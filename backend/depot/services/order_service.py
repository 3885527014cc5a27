"""
Order Service - order creation and deletion transactions

Creating an order reserves stock, records the customer's new debt and
refreshes the wallet. Deleting an order reverses all of that, including
the payments that were linked to it. Both run as one transaction through
run_with_retry; any failure rolls back every row they touched.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Customer, InventoryItem, Order, OrderLine, Payment
from ..schemas import CreateOrderRequest, UpdateOrderRequest
from ..validation import ValidationError
from depot.time_utils import utcnow
from .balance_service import recompute_customer_wallet
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry
from .document_service import next_document_number
from .errors import CustomerNotFoundError, InsufficientStockError, ItemNotFoundError, OrderNotFoundError
from .inventory_service import deduct_stock, restock


def _validate_create_request(request: CreateOrderRequest) -> None:
    if not request.lines:
        raise ValidationError("Order must have at least one line")
    for index, line in enumerate(request.lines):
        if line.quantity is None or line.quantity < 1:
            raise ValidationError(f"lines[{index}].quantity must be at least 1")
        if line.unit_price_cents is not None and line.unit_price_cents < 0:
            raise ValidationError(f"lines[{index}].unit_price_cents cannot be negative")
    if request.discount_cents < 0:
        raise ValidationError("discount_cents cannot be negative")
    if request.amount_paid_cents < 0:
        raise ValidationError("amount_paid_cents cannot be negative")


def _load_items(request: CreateOrderRequest) -> tuple[dict[int, InventoryItem], dict[int, int]]:
    """Load every referenced item and check summed quantities against stock."""
    items: dict[int, InventoryItem] = {}
    requested: dict[int, int] = {}
    for line in request.lines:
        if line.inventory_item_id not in items:
            item = db.session.get(InventoryItem, line.inventory_item_id)
            if not item:
                raise ItemNotFoundError(line.inventory_item_id)
            items[item.id] = item
        requested[line.inventory_item_id] = requested.get(line.inventory_item_id, 0) + line.quantity

    for item_id, qty in requested.items():
        item = items[item_id]
        if item.quantity < qty:
            raise InsufficientStockError(item.display_name, item.quantity, qty, item_id=item.id)

    return items, requested


def create_order(request: CreateOrderRequest) -> Order:
    """
    Create an order, deduct stock and refresh the customer's wallet.

    amount_paid_cents on the request records money settled at the counter
    for this order. It is not a Payment row and never draws on the wallet.
    """
    _validate_create_request(request)

    def _op() -> Order:
        begin_write_transaction()

        customer = lock_for_update(db.session.query(Customer).filter_by(id=request.customer_id)).first()
        if not customer:
            raise CustomerNotFoundError(request.customer_id)

        items, requested = _load_items(request)

        lines = []
        subtotal = 0
        for line in request.lines:
            item = items[line.inventory_item_id]
            unit_price = item.unit_price_cents if line.unit_price_cents is None else line.unit_price_cents
            line_total = unit_price * line.quantity
            subtotal += line_total
            lines.append(OrderLine(
                inventory_item_id=item.id,
                item_name=item.item_name,
                brand=item.brand,
                unit=item.unit,
                quantity=line.quantity,
                unit_price_cents=unit_price,
                line_total_cents=line_total,
            ))

        if request.discount_cents > subtotal:
            raise ValidationError(
                "Discount cannot exceed subtotal",
                {"subtotal_cents": subtotal, "discount_cents": request.discount_cents},
            )
        total = subtotal - request.discount_cents
        if request.amount_paid_cents > total:
            raise ValidationError(
                "amount_paid_cents cannot exceed order total",
                {"total_cents": total, "amount_paid_cents": request.amount_paid_cents},
            )

        order = Order(
            order_number=next_document_number("ORDER"),
            customer_id=customer.id,
            subtotal_cents=subtotal,
            discount_cents=request.discount_cents,
            tax_cents=0,
            total_cents=total,
            amount_paid_cents=request.amount_paid_cents,
            status=request.status,
            delivery_address=request.delivery_address,
            delivery_date=request.delivery_date,
            notes=request.notes,
            created_by=request.created_by,
            created_at=utcnow(),
        )
        order.lines = lines
        order.refresh_payment_state()
        db.session.add(order)

        for item_id, qty in requested.items():
            deduct_stock(item_id, qty)

        recompute_customer_wallet(customer.id)

        customer.total_orders = (customer.total_orders or 0) + 1
        customer.total_purchases_cents = (customer.total_purchases_cents or 0) + total
        customer.last_order_date = order.created_at

        db.session.commit()
        return order

    return run_with_retry(_op)


def delete_order(order_id: int) -> dict:
    """
    Delete an order and undo its effects.

    - every line whose item still exists is restocked
    - payments linked to the order are deleted with it
    - customer counters shrink (never below zero)
    - the wallet is recomputed from what remains
    """
    def _op() -> dict:
        begin_write_transaction()

        customer_id = db.session.query(Order.customer_id).filter_by(id=order_id).scalar()
        if customer_id is None:
            raise OrderNotFoundError(order_id)

        # Lock order: customer, then order, then items
        customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise OrderNotFoundError(order_id)

        restored = 0
        for line in order.lines:
            if line.inventory_item_id and restock(line.inventory_item_id, line.quantity):
                restored += 1

        payments = db.session.query(Payment).filter_by(order_id=order.id).all()
        deleted_total = sum(p.amount_cents for p in payments)
        for payment in payments:
            db.session.delete(payment)
        db.session.flush()

        customer.total_orders = max(0, (customer.total_orders or 0) - 1)
        customer.total_purchases_cents = max(0, (customer.total_purchases_cents or 0) - order.total_cents)

        db.session.delete(order)
        recompute_customer_wallet(customer.id)

        db.session.commit()
        return {
            "order_id": order_id,
            "restored_item_count": restored,
            "deleted_payment_count": len(payments),
            "deleted_payment_total_cents": deleted_total,
        }

    return run_with_retry(_op)


def update_order_status(order_id: int, request: UpdateOrderRequest) -> Order:
    """Status, delivery and notes edits. Financial fields are never touched."""
    def _op() -> Order:
        order = get_order(order_id)
        for key, value in request.changes().items():
            setattr(order, key, value)
        db.session.commit()
        return order

    return run_with_retry(_op)


def get_order(order_id: int) -> Order:
    order = db.session.get(Order, order_id)
    if not order:
        raise OrderNotFoundError(order_id)
    return order


def list_orders(
    *,
    customer_id: int | None = None,
    status: str | None = None,
    payment_status: str | None = None,
) -> list[Order]:
    query = db.session.query(Order)
    if customer_id:
        query = query.filter(Order.customer_id == customer_id)
    if status:
        query = query.filter(Order.status == status)
    if payment_status:
        query = query.filter(Order.payment_status == payment_status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def order_stats(orders: list[Order]) -> dict:
    return {
        "total_orders": len(orders),
        "total_revenue_cents": sum(o.total_cents for o in orders),
        "total_outstanding_cents": sum(o.balance_cents for o in orders),
        "pending_count": sum(1 for o in orders if o.status == "PENDING"),
    }
