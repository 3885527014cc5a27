from __future__ import annotations

from ..extensions import db
from depot.time_utils import to_utc_z, utcnow


PAYMENT_METHODS = ("CASH", "BANK_TRANSFER", "CHEQUE", "POS", "MOBILE_MONEY")
PAYMENT_STATUSES = ("PENDING", "CONFIRMED", "FAILED", "REFUNDED")


class Payment(db.Model):
    """
    Money received from a customer.

    A payment is an immutable financial event: amount, customer and order
    link never change after creation. Only reference/bank/notes/status may be
    edited. Every persisted payment counts toward the customer's wallet
    recompute regardless of its status.

    Payments are removed only when the order they are linked to is deleted.
    """
    __tablename__ = "payments"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_payments_amount_positive"),
        db.Index("ix_payments_customer_date", "customer_id", "payment_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    payment_number = db.Column(db.String(32), nullable=False, unique=True, index=True)

    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)

    amount_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    reference_number = db.Column(db.String(128), nullable=True)
    bank_name = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="CONFIRMED", index=True)
    received_by = db.Column(db.String(128), nullable=False, default="System")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    customer = db.relationship("Customer", backref=db.backref("payments", lazy=True))
    order = db.relationship("Order", backref=db.backref("payments", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "payment_number": self.payment_number,
            "customer_id": self.customer_id,
            "order_id": self.order_id,
            "amount_cents": self.amount_cents,
            "payment_method": self.payment_method,
            "payment_date": to_utc_z(self.payment_date),
            "reference_number": self.reference_number,
            "bank_name": self.bank_name,
            "notes": self.notes,
            "status": self.status,
            "received_by": self.received_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
