# backend/depot/routes/taxes.py
"""
Tax record API Routes

tax_amount_cents is never accepted from clients; it is derived from
taxable_amount_cents and tax_rate_bps (basis points, 750 = 7.5%).
"""

from flask import Blueprint, request, current_app

from ..models.back_office import TAX_STATUSES, TAX_TYPES
from ..responses import LEDGER_ERRORS, ledger_failure, server_error, success
from ..schemas import CreateTaxRequest, MarkTaxPaidRequest, UpdateTaxRequest
from ..services import tax_service
from ..validation import coerce_choice


taxes_bp = Blueprint("taxes", __name__, url_prefix="/api/taxes")


@taxes_bp.get("/")
def list_taxes_route():
    try:
        records = tax_service.list_tax_records(
            status=coerce_choice("status", request.args.get("status"), TAX_STATUSES),
            tax_type=coerce_choice("tax_type", request.args.get("tax_type"), TAX_TYPES),
        )
        return success({
            "taxes": [r.to_dict() for r in records],
            "stats": {
                "record_count": len(records),
                "total_tax_cents": sum(r.tax_amount_cents for r in records),
                "unpaid_tax_cents": sum(r.tax_amount_cents for r in records if r.status != "PAID"),
            },
        })
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to list tax records")
        return server_error()


@taxes_bp.post("/")
def create_tax_route():
    """
    Request body:
    {
        "tax_type": "VAT",
        "period": {"year": 2026, "month": 10},
        "taxable_amount_cents": 100000000,
        "tax_rate_bps": 750,
        "due_date": "2026-11-21"
    }
    """
    try:
        req = CreateTaxRequest.from_payload(request.get_json(silent=True))
        record = tax_service.create_tax_record(req)
        return success(record.to_dict(), 201)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to create tax record")
        return server_error()


@taxes_bp.get("/<int:record_id>")
def get_tax_route(record_id: int):
    try:
        return success(tax_service.get_tax_record(record_id).to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to load tax record")
        return server_error()


@taxes_bp.put("/<int:record_id>")
def update_tax_route(record_id: int):
    try:
        req = UpdateTaxRequest.from_payload(request.get_json(silent=True))
        record = tax_service.update_tax_record(record_id, req)
        return success(record.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to update tax record")
        return server_error()


@taxes_bp.post("/<int:record_id>/pay")
def pay_tax_route(record_id: int):
    try:
        req = MarkTaxPaidRequest.from_payload(request.get_json(silent=True))
        record = tax_service.mark_tax_paid(record_id, req)
        return success(record.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to mark tax record paid")
        return server_error()


@taxes_bp.delete("/<int:record_id>")
def delete_tax_route(record_id: int):
    try:
        tax_service.delete_tax_record(record_id)
        return success({"message": "Tax record deleted successfully", "tax_record_id": record_id})
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to delete tax record")
        return server_error()
