# backend/depot/routes/customers.py
"""Customer API Routes: master data, overview, statement and wallet."""

from flask import Blueprint, request, current_app

from ..models.customers import CUSTOMER_STATUSES, CUSTOMER_TYPES
from ..responses import LEDGER_ERRORS, ledger_failure, server_error, success
from ..schemas import CreateCustomerRequest, UpdateCustomerRequest
from ..services import balance_service, customer_service, reporting_service
from ..validation import coerce_choice


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("/")
def list_customers_route():
    try:
        customers = customer_service.list_customers(
            status=coerce_choice("status", request.args.get("status"), CUSTOMER_STATUSES),
            customer_type=coerce_choice("customer_type", request.args.get("customer_type"), CUSTOMER_TYPES),
        )
        return success([c.to_dict() for c in customers])
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return server_error()


@customers_bp.post("/")
def create_customer_route():
    try:
        req = CreateCustomerRequest.from_payload(request.get_json(silent=True))
        customer = customer_service.create_customer(req)
        return success(customer.to_dict(), 201)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return server_error()


@customers_bp.get("/<int:customer_id>")
def get_customer_route(customer_id: int):
    """Customer with orders, payments and ledger stats."""
    try:
        return success(customer_service.get_customer_overview(customer_id))
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to load customer")
        return server_error()


@customers_bp.put("/<int:customer_id>")
def update_customer_route(customer_id: int):
    try:
        req = UpdateCustomerRequest.from_payload(request.get_json(silent=True))
        customer = customer_service.update_customer(customer_id, req)
        return success(customer.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return server_error()


@customers_bp.delete("/<int:customer_id>")
def delete_customer_route(customer_id: int):
    try:
        customer_service.delete_customer(customer_id)
        return success({"message": "Customer deleted successfully", "customer_id": customer_id})
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return server_error()


@customers_bp.get("/<int:customer_id>/statement")
def customer_statement_route(customer_id: int):
    """
    Statement data for a date range.

    Query params (ISO-8601, both inclusive):
    - start
    - end
    """
    try:
        data = reporting_service.customer_statement(
            customer_id,
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
        return success(data)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to build customer statement")
        return server_error()


@customers_bp.get("/<int:customer_id>/wallet")
def customer_wallet_route(customer_id: int):
    """Freshly computed wallet next to the stored value."""
    try:
        customer = customer_service.get_customer(customer_id)
        snapshot = balance_service.compute_wallet(customer_id)
        data = snapshot.to_dict()
        data["stored_wallet_cents"] = customer.balance_cents
        return success(data)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to compute customer wallet")
        return server_error()
