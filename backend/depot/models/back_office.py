from __future__ import annotations

from ..extensions import db
from depot.time_utils import to_utc_z, utcnow


EXPENSE_CATEGORIES = (
    "TRANSPORTATION",
    "UTILITIES",
    "SALARIES",
    "RENT",
    "MAINTENANCE",
    "MARKETING",
    "OFFICE_SUPPLIES",
    "INSURANCE",
    "PROFESSIONAL_SERVICES",
    "FUEL",
    "LOADING_OFFLOADING",
    "SECURITY",
    "OTHER",
)
EXPENSE_STATUSES = ("PENDING", "APPROVED", "PAID", "REJECTED")

TAX_TYPES = (
    "VAT",
    "COMPANY_INCOME_TAX",
    "WHT",
    "PERSONAL_INCOME_TAX",
    "IMPORT_DUTY",
    "EXPORT_LEVY",
    "BUSINESS_PREMISES_TAX",
    "EDUCATION_TAX",
    "OTHER",
)
TAX_PAYMENT_METHODS = ("CASH", "BANK_TRANSFER", "CHEQUE", "ONLINE_PAYMENT")
TAX_STATUSES = ("PENDING", "PAID", "OVERDUE", "PARTIALLY_PAID")


class Expense(db.Model):
    """Operating expense. Not part of the customer ledger."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.CheckConstraint("amount_cents >= 0", name="ck_expenses_amount_non_negative"),
        db.Index("ix_expenses_status_date", "status", "expense_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    expense_number = db.Column(db.String(32), nullable=False, unique=True, index=True)

    category = db.Column(db.String(32), nullable=False, index=True)
    description = db.Column(db.String(512), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)

    vendor_name = db.Column(db.String(255), nullable=True)
    vendor_contact = db.Column(db.String(255), nullable=True)

    payment_method = db.Column(db.String(16), nullable=False)
    expense_date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    reference_number = db.Column(db.String(128), nullable=True)
    invoice_number = db.Column(db.String(128), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="PAID")
    tax_deductible = db.Column(db.Boolean, nullable=False, default=False)
    notes = db.Column(db.Text, nullable=True)
    recorded_by = db.Column(db.String(128), nullable=False, default="System")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "expense_number": self.expense_number,
            "category": self.category,
            "description": self.description,
            "amount_cents": self.amount_cents,
            "vendor": {
                "name": self.vendor_name,
                "contact": self.vendor_contact,
            },
            "payment_method": self.payment_method,
            "expense_date": to_utc_z(self.expense_date),
            "reference_number": self.reference_number,
            "invoice_number": self.invoice_number,
            "status": self.status,
            "tax_deductible": self.tax_deductible,
            "notes": self.notes,
            "recorded_by": self.recorded_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class TaxRecord(db.Model):
    """
    Tax liability for one period.

    tax_rate_bps is basis points (750 = 7.5%). tax_amount_cents is always
    derived from taxable_amount_cents and the rate by tax_service.
    """
    __tablename__ = "tax_records"
    __table_args__ = (
        db.CheckConstraint("taxable_amount_cents >= 0", name="ck_tax_records_taxable_non_negative"),
        db.CheckConstraint("tax_rate_bps >= 0 AND tax_rate_bps <= 10000", name="ck_tax_records_rate_range"),
        db.Index("ix_tax_records_period", "period_year", "period_month"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tax_number = db.Column(db.String(32), nullable=False, unique=True, index=True)
    tax_type = db.Column(db.String(32), nullable=False, index=True)

    period_year = db.Column(db.Integer, nullable=False)
    period_month = db.Column(db.Integer, nullable=True)
    period_quarter = db.Column(db.Integer, nullable=True)

    taxable_amount_cents = db.Column(db.Integer, nullable=False)
    tax_rate_bps = db.Column(db.Integer, nullable=False)
    tax_amount_cents = db.Column(db.Integer, nullable=False)

    due_date = db.Column(db.DateTime(timezone=True), nullable=False)
    payment_date = db.Column(db.DateTime(timezone=True), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)
    payment_reference = db.Column(db.String(128), nullable=True)
    payment_method = db.Column(db.String(16), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    recorded_by = db.Column(db.String(128), nullable=False, default="System")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tax_number": self.tax_number,
            "tax_type": self.tax_type,
            "period": {
                "year": self.period_year,
                "month": self.period_month,
                "quarter": self.period_quarter,
            },
            "taxable_amount_cents": self.taxable_amount_cents,
            "tax_rate_bps": self.tax_rate_bps,
            "tax_amount_cents": self.tax_amount_cents,
            "due_date": to_utc_z(self.due_date),
            "payment_date": to_utc_z(self.payment_date) if self.payment_date else None,
            "status": self.status,
            "payment_reference": self.payment_reference,
            "payment_method": self.payment_method,
            "notes": self.notes,
            "recorded_by": self.recorded_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
