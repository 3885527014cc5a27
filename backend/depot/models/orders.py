from __future__ import annotations

from ..extensions import db
from depot.time_utils import to_utc_z, utcnow


ORDER_STATUSES = ("PENDING", "PROCESSING", "COMPLETED", "CANCELLED")
DELIVERY_STATUSES = ("NOT_DISPATCHED", "IN_TRANSIT", "DELIVERED")

PAYMENT_STATUS_UNPAID = "UNPAID"
PAYMENT_STATUS_PARTIAL = "PARTIAL"
PAYMENT_STATUS_PAID = "PAID"


class Order(db.Model):
    """
    A customer's debt for one delivery of goods.

    FINANCIAL FIELDS (cents):
    - total_cents = subtotal_cents - discount_cents + tax_cents, fixed at creation
    - amount_paid_cents only grows (payment allocation)
    - balance_cents = total_cents - amount_paid_cents
    - payment_status derived from amount_paid vs total

    Call refresh_payment_state() after touching amount_paid_cents.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("amount_paid_cents >= 0", name="ck_orders_amount_paid_non_negative"),
        db.Index("ix_orders_customer_created", "customer_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(32), nullable=False, unique=True, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    tax_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)
    balance_cents = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)
    payment_status = db.Column(db.String(16), nullable=False, default=PAYMENT_STATUS_UNPAID, index=True)
    delivery_status = db.Column(db.String(16), nullable=False, default="NOT_DISPATCHED")
    delivery_address = db.Column(db.String(512), nullable=True)
    delivery_date = db.Column(db.DateTime(timezone=True), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.String(128), nullable=False, default="System")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    customer = db.relationship("Customer", backref=db.backref("orders", lazy=True))
    lines = db.relationship(
        "OrderLine",
        backref="order",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )
    __mapper_args__ = {"version_id_col": version_id}

    def refresh_payment_state(self) -> None:
        self.balance_cents = self.total_cents - self.amount_paid_cents

        if self.amount_paid_cents == 0:
            self.payment_status = PAYMENT_STATUS_UNPAID
        elif self.amount_paid_cents >= self.total_cents:
            self.payment_status = PAYMENT_STATUS_PAID
        else:
            self.payment_status = PAYMENT_STATUS_PARTIAL

    def to_dict(self, include_lines: bool = True) -> dict:
        data = {
            "id": self.id,
            "order_number": self.order_number,
            "customer_id": self.customer_id,
            "subtotal_cents": self.subtotal_cents,
            "discount_cents": self.discount_cents,
            "tax_cents": self.tax_cents,
            "total_cents": self.total_cents,
            "amount_paid_cents": self.amount_paid_cents,
            "balance_cents": self.balance_cents,
            "status": self.status,
            "payment_status": self.payment_status,
            "delivery_status": self.delivery_status,
            "delivery_address": self.delivery_address,
            "delivery_date": to_utc_z(self.delivery_date) if self.delivery_date else None,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
        if include_lines:
            data["lines"] = [line.to_dict() for line in self.lines]
        return data


class OrderLine(db.Model):
    """Snapshot of one ordered item, frozen at order creation."""
    __tablename__ = "order_lines"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_lines_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    # Weak reference: used to restock on delete, survives item deletion as NULL
    inventory_item_id = db.Column(
        db.Integer,
        db.ForeignKey("inventory_items.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    item_name = db.Column(db.String(255), nullable=False)
    brand = db.Column(db.String(128), nullable=False)
    unit = db.Column(db.String(16), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "inventory_item_id": self.inventory_item_id,
            "item_name": self.item_name,
            "brand": self.brand,
            "unit": self.unit,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
        }
