from datetime import datetime, timedelta

import pytest

from depot.extensions import db
from depot.models import Order, Payment
from depot.schemas import CreateExpenseRequest, CreateTaxRequest
from depot.services import expense_service, reporting_service, tax_service
from depot.time_utils import utcnow
from depot.validation import ValidationError


def test_dashboard_on_empty_database(db_session):
    summary = reporting_service.dashboard_summary()

    assert summary["sales"]["total_orders"] == 0
    assert summary["outstanding"]["total_cents"] == 0
    assert summary["inventory"]["item_count"] == 0
    assert summary["profitability"]["profit_margin_pct"] == 0


def test_dashboard_sections(make_customer, make_item, make_order, pay):
    alice = make_customer(name="Alice", old_balance_cents=700)
    bob = make_customer(name="Bob")
    item = make_item(quantity=12, unit_price_cents=1000, reorder_level=10)
    make_item(item_name="Brown Beans", quantity=0, category="BEANS")

    make_order(alice, (item, 2))
    make_order(bob, (item, 1), amount_paid_cents=1000)
    pay(bob, 400)

    expense_service.create_expense(CreateExpenseRequest(
        category="FUEL",
        description="Diesel",
        amount_cents=1500,
        payment_method="CASH",
    ))
    tax_service.create_tax_record(CreateTaxRequest(
        tax_type="VAT",
        period_year=2026,
        period_month=10,
        taxable_amount_cents=10_000,
        tax_rate_bps=750,
        due_date=utcnow() + timedelta(days=10),
    ))

    summary = reporting_service.dashboard_summary()

    assert summary["sales"] == {
        "total_revenue_cents": 3000,
        "total_orders": 2,
        "month_revenue_cents": 3000,
        "month_orders": 2,
    }
    assert summary["payments"] == {"month_total_cents": 400, "month_count": 1}
    assert summary["outstanding"] == {
        "order_debt_cents": 2000,
        "old_balance_cents": 700,
        "total_cents": 2700,
        "customer_count": 1,
    }
    assert summary["wallets"] == {"total_credit_cents": 400, "customer_count": 1}
    assert summary["expenses"] == {"month_total_cents": 1500, "month_count": 1}
    assert summary["inventory"]["item_count"] == 2
    assert summary["inventory"]["low_stock_count"] == 1
    assert summary["inventory"]["out_of_stock_count"] == 1
    assert summary["inventory"]["total_value_cents"] == 9 * 1000
    assert summary["taxes"] == {"unpaid_count": 1, "total_due_cents": 750}
    assert summary["profitability"] == {
        "month_gross_profit_cents": 3000,
        "month_net_profit_cents": 1500,
        "profit_margin_pct": 50.0,
    }


def test_dashboard_ignores_cancelled_orders(make_customer, make_item, make_order):
    customer = make_customer()
    item = make_item(unit_price_cents=1000)
    make_order(customer, (item, 1), status="CANCELLED")

    summary = reporting_service.dashboard_summary()

    assert summary["sales"]["total_orders"] == 0
    assert summary["sales"]["total_revenue_cents"] == 0


def test_customer_statement_range(make_customer, make_item, make_order, pay):
    customer = make_customer(old_balance_cents=300)
    item = make_item(unit_price_cents=1000)
    old = make_order(customer, (item, 1))
    recent = make_order(customer, (item, 2))
    pay(customer, 500, payment_date=datetime(2026, 9, 15, 8, 0))
    pay(customer, 200, payment_date=datetime(2026, 10, 31, 23, 30))

    db.session.query(Order).filter_by(id=old.id).update({"created_at": datetime(2026, 9, 1, 12, 0)})
    db.session.query(Order).filter_by(id=recent.id).update({"created_at": datetime(2026, 10, 10, 12, 0)})
    db.session.commit()

    statement = reporting_service.customer_statement(customer.id, start="2026-10-01", end="2026-10-31")

    assert [o["id"] for o in statement["orders"]] == [recent.id]
    # A date-only end covers the whole day
    assert [p["amount_cents"] for p in statement["payments"]] == [200]
    assert statement["date_range"]["start"] == "2026-10-01T00:00:00Z"
    assert statement["summary"]["old_balance_cents"] == 300
    assert statement["summary"]["total_orders_cents"] == 2000
    assert statement["summary"]["total_payments_cents"] == 200

    full = reporting_service.customer_statement(customer.id)
    assert [o["id"] for o in full["orders"]] == [old.id, recent.id]
    assert [p["amount_cents"] for p in full["payments"]] == [500, 200]
    assert db.session.query(Payment).count() == 2


def test_customer_statement_rejects_bad_range(make_customer):
    customer = make_customer()

    with pytest.raises(ValidationError):
        reporting_service.customer_statement(customer.id, start="2026-11-01", end="2026-10-01")
    with pytest.raises(ValidationError):
        reporting_service.customer_statement(customer.id, start="yesterday")
