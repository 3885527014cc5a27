from __future__ import annotations

from ..extensions import db
from ..models import Expense
from ..schemas import CreateExpenseRequest, UpdateExpenseRequest
from depot.time_utils import utcnow
from .concurrency import begin_write_transaction, run_with_retry
from .document_service import next_document_number
from .errors import RecordNotFoundError


def create_expense(request: CreateExpenseRequest) -> Expense:
    def _op():
        begin_write_transaction()
        expense = Expense(
            expense_number=next_document_number("EXPENSE"),
            category=request.category,
            description=request.description,
            amount_cents=request.amount_cents,
            vendor_name=request.vendor_name,
            vendor_contact=request.vendor_contact,
            payment_method=request.payment_method,
            expense_date=request.expense_date or utcnow(),
            reference_number=request.reference_number,
            invoice_number=request.invoice_number,
            status=request.status,
            tax_deductible=request.tax_deductible,
            notes=request.notes,
            recorded_by=request.recorded_by,
        )
        db.session.add(expense)
        db.session.commit()
        return expense

    return run_with_retry(_op)


def get_expense(expense_id: int) -> Expense:
    expense = db.session.get(Expense, expense_id)
    if not expense:
        raise RecordNotFoundError("Expense", expense_id)
    return expense


def list_expenses(*, status: str | None = None, category: str | None = None) -> list[Expense]:
    query = db.session.query(Expense)
    if status:
        query = query.filter(Expense.status == status)
    if category:
        query = query.filter(Expense.category == category)
    return query.order_by(Expense.expense_date.desc(), Expense.id.desc()).all()


def update_expense(expense_id: int, request: UpdateExpenseRequest) -> Expense:
    def _op():
        expense = get_expense(expense_id)
        for key, value in request.changes().items():
            setattr(expense, key, value)
        db.session.commit()
        return expense

    return run_with_retry(_op)


def delete_expense(expense_id: int) -> None:
    def _op():
        expense = get_expense(expense_id)
        db.session.delete(expense)
        db.session.commit()

    run_with_retry(_op)
