# backend/depot/routes/reports.py
from flask import Blueprint, current_app

from ..responses import LEDGER_ERRORS, ledger_failure, server_error, success
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
def dashboard_route():
    """Current-month business summary (sales, payments, debt, stock, taxes)."""
    try:
        return success(reporting_service.dashboard_summary())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to build dashboard summary")
        return server_error()
