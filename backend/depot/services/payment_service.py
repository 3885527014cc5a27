"""
Payment Service - payment recording and allocation

A payment is applied to order debt when it is recorded:
- linked to an order: up to that order's outstanding balance, nothing more
- not linked: greedily across the customer's open orders, oldest first

Whatever is not absorbed by orders stays unallocated. The wallet recompute
at the end of the transaction turns it into credit once the customer's
old balance and order debt are covered. The old balance itself is never
reduced by allocation.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Customer, Order, Payment
from ..schemas import RecordPaymentRequest, UpdatePaymentRequest
from ..validation import MAX_AMOUNT_CENTS, ValidationError
from depot.time_utils import utcnow
from .balance_service import recompute_customer_wallet
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry
from .document_service import next_document_number
from .errors import CustomerNotFoundError, OrderNotFoundError, PaymentNotFoundError


def _apply(order: Order, amount_cents: int) -> int:
    applied = min(amount_cents, max(0, order.balance_cents))
    if applied:
        order.amount_paid_cents += applied
        order.refresh_payment_state()
    return applied


def allocate_payment(customer_id: int, amount_cents: int, *, order_id: int | None = None) -> list[tuple[Order, int]]:
    """
    Apply `amount_cents` to order debt inside the caller's transaction.

    Returns (order, applied_cents) pairs in application order. Orders that
    absorbed nothing are left out.
    """
    if amount_cents <= 0:
        raise ValidationError("Payment amount must be greater than zero")

    if order_id is not None:
        order = lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()
        if not order:
            raise OrderNotFoundError(order_id)
        if order.customer_id != customer_id:
            raise ValidationError(
                "Order does not belong to this customer",
                {"order_id": order_id, "customer_id": customer_id},
            )
        applied = _apply(order, amount_cents)
        return [(order, applied)] if applied else []

    open_orders = (
        lock_for_update(
            db.session.query(Order)
            .filter(Order.customer_id == customer_id, Order.balance_cents > 0)
            .order_by(Order.created_at.asc(), Order.id.asc())
        )
        .all()
    )

    allocations: list[tuple[Order, int]] = []
    remaining = amount_cents
    for order in open_orders:
        if remaining <= 0:
            break
        applied = _apply(order, remaining)
        if applied:
            allocations.append((order, applied))
            remaining -= applied
    return allocations


def record_payment_with_allocations(request: RecordPaymentRequest) -> tuple[Payment, list[tuple[Order, int]]]:
    if request.amount_cents is None or request.amount_cents <= 0:
        raise ValidationError("Payment amount must be greater than zero")
    if request.amount_cents > MAX_AMOUNT_CENTS:
        raise ValidationError(f"amount_cents cannot exceed {MAX_AMOUNT_CENTS}")

    def _op():
        begin_write_transaction()

        customer = lock_for_update(db.session.query(Customer).filter_by(id=request.customer_id)).first()
        if not customer:
            raise CustomerNotFoundError(request.customer_id)

        allocations = allocate_payment(customer.id, request.amount_cents, order_id=request.order_id)

        payment = Payment(
            payment_number=next_document_number("PAYMENT"),
            customer_id=customer.id,
            order_id=request.order_id,
            amount_cents=request.amount_cents,
            payment_method=request.payment_method,
            payment_date=request.payment_date or utcnow(),
            reference_number=request.reference_number,
            bank_name=request.bank_name,
            notes=request.notes,
            status=request.status,
            received_by=request.received_by,
            created_at=utcnow(),
        )
        db.session.add(payment)

        recompute_customer_wallet(customer.id)

        db.session.commit()
        return payment, allocations

    return run_with_retry(_op)


def record_payment(request: RecordPaymentRequest) -> Payment:
    """Record a payment, allocate it to order debt and refresh the wallet."""
    payment, _ = record_payment_with_allocations(request)
    return payment


def update_payment_details(payment_id: int, request: UpdatePaymentRequest) -> Payment:
    """Edit reference, bank, notes or status. Amount and links are immutable."""
    def _op():
        payment = get_payment(payment_id)
        for key, value in request.changes().items():
            setattr(payment, key, value)
        db.session.commit()
        return payment

    return run_with_retry(_op)


def get_payment(payment_id: int) -> Payment:
    payment = db.session.get(Payment, payment_id)
    if not payment:
        raise PaymentNotFoundError(payment_id)
    return payment


def list_payments(
    *,
    customer_id: int | None = None,
    order_id: int | None = None,
    status: str | None = None,
) -> list[Payment]:
    query = db.session.query(Payment)
    if customer_id:
        query = query.filter(Payment.customer_id == customer_id)
    if order_id:
        query = query.filter(Payment.order_id == order_id)
    if status:
        query = query.filter(Payment.status == status)
    return query.order_by(Payment.payment_date.desc(), Payment.id.desc()).all()
