# backend/depot/routes/expenses.py
from flask import Blueprint, request, current_app

from ..models.back_office import EXPENSE_CATEGORIES, EXPENSE_STATUSES
from ..responses import LEDGER_ERRORS, ledger_failure, server_error, success
from ..schemas import CreateExpenseRequest, UpdateExpenseRequest
from ..services import expense_service
from ..validation import coerce_choice


expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.get("/")
def list_expenses_route():
    try:
        expenses = expense_service.list_expenses(
            status=coerce_choice("status", request.args.get("status"), EXPENSE_STATUSES),
            category=coerce_choice("category", request.args.get("category"), EXPENSE_CATEGORIES),
        )
        return success({
            "expenses": [e.to_dict() for e in expenses],
            "stats": {
                "expense_count": len(expenses),
                "total_amount_cents": sum(e.amount_cents for e in expenses),
            },
        })
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to list expenses")
        return server_error()


@expenses_bp.post("/")
def create_expense_route():
    try:
        req = CreateExpenseRequest.from_payload(request.get_json(silent=True))
        expense = expense_service.create_expense(req)
        return success(expense.to_dict(), 201)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to create expense")
        return server_error()


@expenses_bp.get("/<int:expense_id>")
def get_expense_route(expense_id: int):
    try:
        return success(expense_service.get_expense(expense_id).to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to load expense")
        return server_error()


@expenses_bp.put("/<int:expense_id>")
def update_expense_route(expense_id: int):
    try:
        req = UpdateExpenseRequest.from_payload(request.get_json(silent=True))
        expense = expense_service.update_expense(expense_id, req)
        return success(expense.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to update expense")
        return server_error()


@expenses_bp.delete("/<int:expense_id>")
def delete_expense_route(expense_id: int):
    try:
        expense_service.delete_expense(expense_id)
        return success({"message": "Expense deleted successfully", "expense_id": expense_id})
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to delete expense")
        return server_error()
