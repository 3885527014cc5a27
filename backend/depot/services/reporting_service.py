from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import func

from depot.extensions import db
from depot.models import Customer, Expense, InventoryItem, Order, Payment, TaxRecord
from depot.models.inventory import STOCK_LOW, STOCK_OUT
from depot.time_utils import month_bounds, parse_iso_datetime, to_utc_z, utcnow
from depot.validation import ValidationError
from .balance_service import compute_wallet
from .customer_service import get_customer


UNPAID_TAX_STATUSES = ("PENDING", "OVERDUE", "PARTIALLY_PAID")


def _parse_range(start: str | None, end: str | None) -> tuple[datetime | None, datetime | None]:
    """
    Parse a statement range. Both bounds are inclusive; a date-only end
    ("2026-10-31") covers that whole day.
    """
    try:
        start_dt = parse_iso_datetime(start) if start else None
        end_dt = parse_iso_datetime(end) if end else None
    except ValueError:
        raise ValidationError("start and end must be ISO-8601 dates")

    if end_dt is not None and len(end.strip()) == 10:
        end_dt = end_dt + timedelta(days=1) - timedelta(microseconds=1)
    if start_dt and end_dt and start_dt > end_dt:
        raise ValidationError("start must be before end")
    return start_dt, end_dt


def _sum(column, *criteria) -> int:
    return int(db.session.query(func.coalesce(func.sum(column), 0)).filter(*criteria).scalar())


def _count(column, *criteria) -> int:
    return int(db.session.query(func.count(column)).filter(*criteria).scalar())


def dashboard_summary(now: datetime | None = None) -> dict:
    """Business health snapshot for the current calendar month."""
    now = now or utcnow()
    month_start, month_end = month_bounds(now)

    not_cancelled = Order.status != "CANCELLED"
    in_month = (Order.created_at >= month_start, Order.created_at < month_end)

    sales = {
        "total_revenue_cents": _sum(Order.total_cents, not_cancelled),
        "total_orders": _count(Order.id, not_cancelled),
        "month_revenue_cents": _sum(Order.total_cents, not_cancelled, *in_month),
        "month_orders": _count(Order.id, not_cancelled, *in_month),
    }

    payment_filter = (
        Payment.status == "CONFIRMED",
        Payment.payment_date >= month_start,
        Payment.payment_date < month_end,
    )
    payments = {
        "month_total_cents": _sum(Payment.amount_cents, *payment_filter),
        "month_count": _count(Payment.id, *payment_filter),
    }

    order_debt = _sum(Order.balance_cents, Order.balance_cents > 0)
    old_balances = _sum(Customer.old_balance_cents)
    debtor_ids = {
        row[0]
        for row in db.session.query(Order.customer_id).filter(Order.balance_cents > 0).distinct()
    } | {
        row[0]
        for row in db.session.query(Customer.id).filter(Customer.old_balance_cents > 0)
    }
    outstanding = {
        "order_debt_cents": order_debt,
        "old_balance_cents": old_balances,
        "total_cents": order_debt + old_balances,
        "customer_count": len(debtor_ids),
    }

    wallets = {
        "total_credit_cents": _sum(Customer.balance_cents, Customer.balance_cents > 0),
        "customer_count": _count(Customer.id, Customer.balance_cents > 0),
    }

    expense_filter = (
        Expense.status == "PAID",
        Expense.expense_date >= month_start,
        Expense.expense_date < month_end,
    )
    expenses = {
        "month_total_cents": _sum(Expense.amount_cents, *expense_filter),
        "month_count": _count(Expense.id, *expense_filter),
    }

    items = db.session.query(InventoryItem).all()
    inventory = {
        "total_value_cents": sum(i.quantity * i.unit_price_cents for i in items),
        "item_count": len(items),
        "low_stock_count": sum(1 for i in items if i.stock_status == STOCK_LOW),
        "out_of_stock_count": sum(1 for i in items if i.stock_status == STOCK_OUT),
    }

    unpaid_tax = TaxRecord.status.in_(UNPAID_TAX_STATUSES)
    taxes = {
        "unpaid_count": _count(TaxRecord.id, unpaid_tax),
        "total_due_cents": _sum(TaxRecord.tax_amount_cents, unpaid_tax),
    }

    month_revenue = sales["month_revenue_cents"]
    net = month_revenue - expenses["month_total_cents"]
    profitability = {
        "month_gross_profit_cents": month_revenue,
        "month_net_profit_cents": net,
        "profit_margin_pct": round(net * 100 / month_revenue, 2) if month_revenue > 0 else 0,
    }

    return {
        "period": {"start": to_utc_z(month_start), "end": to_utc_z(month_end)},
        "sales": sales,
        "payments": payments,
        "outstanding": outstanding,
        "wallets": wallets,
        "expenses": expenses,
        "inventory": inventory,
        "taxes": taxes,
        "profitability": profitability,
    }


def customer_statement(customer_id: int, start: str | None = None, end: str | None = None) -> dict:
    """Orders and payments in range, oldest first, with a ledger summary."""
    customer = get_customer(customer_id)
    start_dt, end_dt = _parse_range(start, end)

    orders_q = db.session.query(Order).filter(Order.customer_id == customer.id)
    payments_q = db.session.query(Payment).filter(Payment.customer_id == customer.id)
    if start_dt:
        orders_q = orders_q.filter(Order.created_at >= start_dt)
        payments_q = payments_q.filter(Payment.payment_date >= start_dt)
    if end_dt:
        orders_q = orders_q.filter(Order.created_at <= end_dt)
        payments_q = payments_q.filter(Payment.payment_date <= end_dt)

    orders = orders_q.order_by(Order.created_at.asc(), Order.id.asc()).all()
    payments = payments_q.order_by(Payment.payment_date.asc(), Payment.id.asc()).all()
    wallet = compute_wallet(customer.id)

    return {
        "customer": customer.to_dict(),
        "orders": [o.to_dict() for o in orders],
        "payments": [p.to_dict() for p in payments],
        "date_range": {
            "start": to_utc_z(start_dt) if start_dt else None,
            "end": to_utc_z(end_dt) if end_dt else None,
        },
        "summary": {
            "old_balance_cents": customer.old_balance_cents,
            "total_orders_cents": sum(o.total_cents for o in orders),
            "total_payments_cents": sum(p.amount_cents for p in payments),
            "current_wallet_cents": customer.balance_cents,
            "outstanding_order_debt_cents": wallet.total_order_debt_cents,
            "total_debt_cents": wallet.total_debt_cents,
        },
    }
