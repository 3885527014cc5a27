from __future__ import annotations

from ..extensions import db
from depot.time_utils import to_utc_z, utcnow


CUSTOMER_TYPES = ("RETAIL", "WHOLESALE", "DISTRIBUTOR", "INDIVIDUAL")
CUSTOMER_STATUSES = ("ACTIVE", "INACTIVE", "SUSPENDED")


class Customer(db.Model):
    """
    Customer master data and ledger aggregates.

    MONEY COLUMNS (all in cents):
    - old_balance_cents: debt carried over from before the system existed.
      Set once at creation and never touched by orders or payments.
    - old_balance_remaining_cents: tracker initialised to old_balance_cents.
      Not consumed by payment allocation.
    - balance_cents: the wallet. Surplus credit once all debt is covered.
      Always recomputed from orders + payments by balance_service, never
      adjusted incrementally.

    Denormalized counters (total_orders, total_purchases_cents) move with
    order creation and deletion.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.CheckConstraint("balance_cents >= 0", name="ck_customers_wallet_non_negative"),
        db.CheckConstraint("old_balance_remaining_cents >= 0", name="ck_customers_old_balance_remaining"),
        db.Index("ix_customers_name", "name"),
        db.Index("ix_customers_phone", "phone"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    business_name = db.Column(db.String(255), nullable=True)

    street = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(128), nullable=False)
    state = db.Column(db.String(128), nullable=False)
    country = db.Column(db.String(128), nullable=False, default="Nigeria")

    customer_type = db.Column(db.String(16), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default="ACTIVE", index=True)
    credit_limit_cents = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    old_balance_cents = db.Column(db.Integer, nullable=False, default=0)
    old_balance_remaining_cents = db.Column(db.Integer, nullable=False, default=0)
    balance_cents = db.Column(db.Integer, nullable=False, default=0)

    total_orders = db.Column(db.Integer, nullable=False, default=0)
    total_purchases_cents = db.Column(db.Integer, nullable=False, default=0)
    last_order_date = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Customer id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "business_name": self.business_name,
            "address": {
                "street": self.street,
                "city": self.city,
                "state": self.state,
                "country": self.country,
            },
            "customer_type": self.customer_type,
            "status": self.status,
            "credit_limit_cents": self.credit_limit_cents,
            "notes": self.notes,
            "old_balance_cents": self.old_balance_cents,
            "old_balance_remaining_cents": self.old_balance_remaining_cents,
            "balance_cents": self.balance_cents,
            "total_orders": self.total_orders,
            "total_purchases_cents": self.total_purchases_cents,
            "last_order_date": to_utc_z(self.last_order_date) if self.last_order_date else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
