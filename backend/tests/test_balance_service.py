from depot.extensions import db
from depot.models import Customer
from depot.services import balance_service


def test_new_customer_has_zero_wallet_and_full_old_balance(make_customer):
    customer = make_customer(old_balance_cents=5000)

    assert customer.balance_cents == 0
    assert customer.old_balance_cents == 5000
    assert customer.old_balance_remaining_cents == 5000


def test_wallet_is_surplus_over_old_balance_and_order_debt(make_customer, make_item, make_order, pay):
    customer = make_customer(old_balance_cents=1000)
    item = make_item(unit_price_cents=1000)
    make_order(customer, (item, 2))

    pay(customer, 3500)

    snapshot = balance_service.compute_wallet(customer.id)
    assert snapshot.total_payments_cents == 3500
    assert snapshot.total_order_debt_cents == 0
    assert snapshot.total_debt_cents == 1000
    assert snapshot.wallet_cents == 2500


def test_wallet_counts_every_payment_against_remaining_debt(make_customer, make_item, make_order, pay):
    customer = make_customer(old_balance_cents=1000)
    item = make_item(unit_price_cents=1000)
    order = make_order(customer, (item, 2))

    pay(customer, 3500)

    db.session.refresh(order)
    db.session.refresh(customer)
    assert order.balance_cents == 0
    assert order.payment_status == "PAID"
    # payments 3500 - (old balance 1000 + order debt 0)
    assert customer.balance_cents == 2500
    assert customer.old_balance_cents == 1000


def test_wallet_stays_zero_while_debt_exceeds_payments(make_customer, make_item, make_order, pay):
    customer = make_customer(old_balance_cents=10_000)
    item = make_item(unit_price_cents=1000)
    make_order(customer, (item, 3))

    pay(customer, 2000)

    db.session.refresh(customer)
    assert customer.balance_cents == 0
    snapshot = balance_service.compute_wallet(customer.id)
    assert snapshot.wallet_cents == 0
    assert snapshot.total_debt_cents == 10_000 + 1000


def test_recompute_all_wallets_repairs_drift(make_customer, pay):
    customer = make_customer()
    pay(customer, 700)

    db.session.query(Customer).filter_by(id=customer.id).update({"balance_cents": 0})
    db.session.commit()

    drift = balance_service.audit_wallets()
    assert [row["customer_id"] for row in drift] == [customer.id]
    assert drift[0]["computed_wallet_cents"] == 700
    assert drift[0]["difference_cents"] == -700

    assert balance_service.recompute_all_wallets() == 1
    db.session.refresh(customer)
    assert customer.balance_cents == 700
    assert balance_service.audit_wallets() == []


def test_sync_old_balance_remaining(make_customer):
    customer = make_customer(old_balance_cents=4000)
    db.session.query(Customer).filter_by(id=customer.id).update({"old_balance_remaining_cents": 0})
    db.session.commit()

    assert balance_service.sync_old_balance_remaining() == 1
    db.session.refresh(customer)
    assert customer.old_balance_remaining_cents == 4000
    assert balance_service.sync_old_balance_remaining() == 0
