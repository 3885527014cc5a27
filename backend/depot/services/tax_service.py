"""
Tax records.

Amounts are derived, never entered: tax_amount_cents is
taxable_amount_cents * tax_rate_bps / 10000 rounded half-up, and is
recomputed whenever either input changes.
"""

from __future__ import annotations

from ..extensions import db
from ..models import TaxRecord
from ..schemas import CreateTaxRequest, MarkTaxPaidRequest, UpdateTaxRequest
from depot.time_utils import utcnow
from .concurrency import begin_write_transaction, run_with_retry
from .document_service import next_document_number
from .errors import RecordNotFoundError


def compute_tax_amount(taxable_amount_cents: int, tax_rate_bps: int) -> int:
    """Integer half-up rounding of taxable * rate / 10000."""
    return (taxable_amount_cents * tax_rate_bps + 5000) // 10000


def create_tax_record(request: CreateTaxRequest) -> TaxRecord:
    def _op():
        begin_write_transaction()
        record = TaxRecord(
            tax_number=next_document_number("TAX"),
            tax_type=request.tax_type,
            period_year=request.period_year,
            period_month=request.period_month,
            period_quarter=request.period_quarter,
            taxable_amount_cents=request.taxable_amount_cents,
            tax_rate_bps=request.tax_rate_bps,
            tax_amount_cents=compute_tax_amount(request.taxable_amount_cents, request.tax_rate_bps),
            due_date=request.due_date,
            payment_date=request.payment_date,
            status=request.status,
            payment_reference=request.payment_reference,
            payment_method=request.payment_method,
            notes=request.notes,
            recorded_by=request.recorded_by,
        )
        db.session.add(record)
        db.session.commit()
        return record

    return run_with_retry(_op)


def get_tax_record(record_id: int) -> TaxRecord:
    record = db.session.get(TaxRecord, record_id)
    if not record:
        raise RecordNotFoundError("Tax record", record_id)
    return record


def list_tax_records(*, status: str | None = None, tax_type: str | None = None) -> list[TaxRecord]:
    query = db.session.query(TaxRecord)
    if status:
        query = query.filter(TaxRecord.status == status)
    if tax_type:
        query = query.filter(TaxRecord.tax_type == tax_type)
    return query.order_by(TaxRecord.due_date.desc(), TaxRecord.id.desc()).all()


def update_tax_record(record_id: int, request: UpdateTaxRequest) -> TaxRecord:
    def _op():
        record = get_tax_record(record_id)
        for key, value in request.changes().items():
            setattr(record, key, value)
        record.tax_amount_cents = compute_tax_amount(record.taxable_amount_cents, record.tax_rate_bps)
        db.session.commit()
        return record

    return run_with_retry(_op)


def mark_tax_paid(record_id: int, request: MarkTaxPaidRequest) -> TaxRecord:
    def _op():
        record = get_tax_record(record_id)
        record.status = "PAID"
        record.payment_date = request.payment_date or utcnow()
        if request.payment_reference is not None:
            record.payment_reference = request.payment_reference
        if request.payment_method is not None:
            record.payment_method = request.payment_method
        db.session.commit()
        return record

    return run_with_retry(_op)


def delete_tax_record(record_id: int) -> None:
    def _op():
        record = get_tax_record(record_id)
        db.session.delete(record)
        db.session.commit()

    run_with_retry(_op)
