"""
Customer Balance Engine

The wallet (Customer.balance_cents) is the credit a customer holds once
every debt is covered:

    total_debt = old_balance + sum(order.balance for every order)
    wallet     = max(0, sum(payment.amount for every payment) - total_debt)

The wallet is ALWAYS recomputed from the persisted orders and payments.
No code path adjusts it incrementally; order creation, order deletion and
payment recording all finish with recompute_customer_wallet() inside their
own transaction.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from sqlalchemy import func

from ..extensions import db
from ..models import Customer, Order, Payment
from .concurrency import begin_write_transaction, run_with_retry
from .errors import CustomerNotFoundError


@dataclass(frozen=True)
class WalletSnapshot:
    customer_id: int
    old_balance_cents: int
    total_order_debt_cents: int
    total_debt_cents: int
    total_payments_cents: int
    wallet_cents: int

    def to_dict(self) -> dict:
        return asdict(self)


def _sum_payments(customer_id: int) -> int:
    return int(
        db.session.query(func.coalesce(func.sum(Payment.amount_cents), 0))
        .filter(Payment.customer_id == customer_id)
        .scalar()
    )


def _sum_order_balances(customer_id: int) -> int:
    return int(
        db.session.query(func.coalesce(func.sum(Order.balance_cents), 0))
        .filter(Order.customer_id == customer_id)
        .scalar()
    )


def _snapshot(customer: Customer) -> WalletSnapshot:
    total_payments = _sum_payments(customer.id)
    total_order_debt = _sum_order_balances(customer.id)
    total_debt = (customer.old_balance_cents or 0) + total_order_debt
    return WalletSnapshot(
        customer_id=customer.id,
        old_balance_cents=customer.old_balance_cents or 0,
        total_order_debt_cents=total_order_debt,
        total_debt_cents=total_debt,
        total_payments_cents=total_payments,
        wallet_cents=max(0, total_payments - total_debt),
    )


def compute_wallet(customer_id: int) -> WalletSnapshot:
    """Read-only wallet computation from persisted state."""
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise CustomerNotFoundError(customer_id)
    return _snapshot(customer)


def recompute_customer_wallet(customer_id: int) -> Customer:
    """
    Recompute and assign the customer's wallet inside the caller's transaction.

    Pending writes are flushed first so the sums see orders and payments the
    caller just added, changed or deleted. Never commits.
    """
    db.session.flush()

    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise CustomerNotFoundError(customer_id)

    snapshot = _snapshot(customer)
    customer.balance_cents = snapshot.wallet_cents
    return customer


def recompute_all_wallets() -> int:
    """Maintenance recompute for every customer in one transaction."""
    def _op() -> int:
        begin_write_transaction()
        customer_ids = [row[0] for row in db.session.query(Customer.id).order_by(Customer.id).all()]
        for customer_id in customer_ids:
            recompute_customer_wallet(customer_id)
        db.session.commit()
        return len(customer_ids)

    return run_with_retry(_op)


def sync_old_balance_remaining() -> int:
    """Reset old_balance_remaining_cents to old_balance_cents where they differ."""
    def _op() -> int:
        begin_write_transaction()
        customers = (
            db.session.query(Customer)
            .filter(Customer.old_balance_remaining_cents != Customer.old_balance_cents)
            .all()
        )
        for customer in customers:
            customer.old_balance_remaining_cents = customer.old_balance_cents
        db.session.commit()
        return len(customers)

    return run_with_retry(_op)


def audit_wallets() -> list[dict]:
    """Customers whose stored wallet differs from the recomputed value."""
    drift = []
    for customer in db.session.query(Customer).order_by(Customer.id).all():
        snapshot = _snapshot(customer)
        if snapshot.wallet_cents != customer.balance_cents:
            drift.append({
                "customer_id": customer.id,
                "name": customer.name,
                "stored_wallet_cents": customer.balance_cents,
                "computed_wallet_cents": snapshot.wallet_cents,
                "difference_cents": customer.balance_cents - snapshot.wallet_cents,
            })
    return drift
