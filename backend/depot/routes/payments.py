# backend/depot/routes/payments.py
"""
Payment API Routes

Payments are financial events: once recorded only reference, bank, notes
and status can change. There is no delete endpoint; payments disappear
only with the order they are linked to.
"""

from flask import Blueprint, request, current_app

from ..models.payments import PAYMENT_STATUSES
from ..responses import LEDGER_ERRORS, ledger_failure, server_error, success
from ..schemas import RecordPaymentRequest, UpdatePaymentRequest
from ..services import payment_service
from ..validation import coerce_choice, coerce_int


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.get("/")
def list_payments_route():
    try:
        payments = payment_service.list_payments(
            customer_id=coerce_int("customer_id", request.args.get("customer_id")),
            order_id=coerce_int("order_id", request.args.get("order_id")),
            status=coerce_choice("status", request.args.get("status"), PAYMENT_STATUSES),
        )
        return success({
            "payments": [p.to_dict() for p in payments],
            "stats": {
                "payment_count": len(payments),
                "total_amount_cents": sum(p.amount_cents for p in payments),
            },
        })
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to list payments")
        return server_error()


@payments_bp.post("/")
def record_payment_route():
    """
    Record a payment.

    Request body:
    {
        "customer_id": 1,
        "order_id": 7,              (optional; omit for a general payment)
        "amount_cents": 5000000,
        "payment_method": "BANK_TRANSFER",
        "payment_date": "2026-10-19T10:00:00Z",
        "reference_number": "TRX-123",
        "bank_name": "...",
        "notes": "...",
        "status": "CONFIRMED",
        "received_by": "System"
    }

    Returns:
        201: Payment recorded, with the allocations it made
        400: Invalid input (non-positive amount, order of another customer)
        404: Customer or order not found
    """
    try:
        req = RecordPaymentRequest.from_payload(request.get_json(silent=True))
        payment, allocations = payment_service.record_payment_with_allocations(req)
        current_app.logger.info(
            "Payment %s recorded for customer %s (amount_cents=%s, orders=%s)",
            payment.payment_number, payment.customer_id, payment.amount_cents, len(allocations),
        )
        data = payment.to_dict()
        data["allocations"] = [
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "applied_cents": applied,
                "order_balance_cents": order.balance_cents,
                "order_payment_status": order.payment_status,
            }
            for order, applied in allocations
        ]
        data["customer_wallet_cents"] = payment.customer.balance_cents
        return success(data, 201)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to record payment")
        return server_error()


@payments_bp.get("/<int:payment_id>")
def get_payment_route(payment_id: int):
    try:
        payment = payment_service.get_payment(payment_id)
        return success(payment.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to load payment")
        return server_error()


@payments_bp.put("/<int:payment_id>")
def update_payment_route(payment_id: int):
    try:
        req = UpdatePaymentRequest.from_payload(request.get_json(silent=True))
        payment = payment_service.update_payment_details(payment_id, req)
        return success(payment.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to update payment")
        return server_error()
