from __future__ import annotations

from ..extensions import db
from ..models import Customer, Order, Payment
from ..schemas import CreateCustomerRequest, UpdateCustomerRequest
from ..validation import ConflictError, ValidationError
from .balance_service import compute_wallet
from .concurrency import begin_write_transaction, lock_for_update, run_with_retry
from .errors import CustomerNotFoundError


def create_customer(request: CreateCustomerRequest) -> Customer:
    """
    Create a customer.

    The old balance is debt carried over from before the system. It is
    fixed here and mirrored into old_balance_remaining_cents.
    """
    def _op():
        customer = Customer(
            name=request.name,
            phone=request.phone,
            email=request.email,
            business_name=request.business_name,
            street=request.street,
            city=request.city,
            state=request.state,
            country=request.country,
            customer_type=request.customer_type,
            status=request.status,
            credit_limit_cents=request.credit_limit_cents,
            notes=request.notes,
            old_balance_cents=request.old_balance_cents,
            old_balance_remaining_cents=request.old_balance_cents,
            balance_cents=0,
        )
        db.session.add(customer)
        db.session.commit()
        return customer

    return run_with_retry(_op)


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if not customer:
        raise CustomerNotFoundError(customer_id)
    return customer


def list_customers(*, status: str | None = None, customer_type: str | None = None) -> list[Customer]:
    query = db.session.query(Customer)
    if status:
        query = query.filter(Customer.status == status)
    if customer_type:
        query = query.filter(Customer.customer_type == customer_type)
    return query.order_by(Customer.name, Customer.id).all()


def update_customer(customer_id: int, request: UpdateCustomerRequest) -> Customer:
    """Edit contact and profile fields. Ledger fields are not editable."""
    def _op():
        customer = get_customer(customer_id)
        changes = request.changes()

        if "old_balance_cents" in changes:
            if changes.pop("old_balance_cents") != customer.old_balance_cents:
                raise ValidationError(
                    "old_balance_cents cannot be changed after creation",
                    {"old_balance_cents": customer.old_balance_cents},
                )

        for key, value in changes.items():
            setattr(customer, key, value)
        db.session.commit()
        return customer

    return run_with_retry(_op)


def delete_customer(customer_id: int) -> None:
    def _op():
        begin_write_transaction()
        customer = lock_for_update(db.session.query(Customer).filter_by(id=customer_id)).first()
        if not customer:
            raise CustomerNotFoundError(customer_id)

        order_count = db.session.query(Order.id).filter(Order.customer_id == customer.id).count()
        if order_count:
            raise ConflictError(
                "Cannot delete customer with existing orders",
                {"customer_id": customer.id, "order_count": order_count},
            )
        payment_count = db.session.query(Payment.id).filter(Payment.customer_id == customer.id).count()
        if payment_count:
            raise ConflictError(
                "Cannot delete customer with recorded payments",
                {"customer_id": customer.id, "payment_count": payment_count},
            )

        db.session.delete(customer)
        db.session.commit()

    run_with_retry(_op)


def get_customer_overview(customer_id: int) -> dict:
    """Customer with orders, payments and ledger stats."""
    customer = get_customer(customer_id)

    orders = (
        db.session.query(Order)
        .filter(Order.customer_id == customer.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    payments = (
        db.session.query(Payment)
        .filter(Payment.customer_id == customer.id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
        .all()
    )
    wallet = compute_wallet(customer.id)

    return {
        "customer": customer.to_dict(),
        "orders": [o.to_dict(include_lines=False) for o in orders],
        "payments": [p.to_dict() for p in payments],
        "stats": {
            "total_order_value_cents": sum(o.total_cents for o in orders),
            "total_payments_cents": wallet.total_payments_cents,
            "wallet_cents": customer.balance_cents,
            "old_balance_cents": customer.old_balance_cents,
            "outstanding_order_debt_cents": wallet.total_order_debt_cents,
            "total_debt_cents": wallet.total_debt_cents,
            "order_count": len(orders),
            "payment_count": len(payments),
        },
    }
