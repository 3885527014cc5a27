"""
JSON envelopes shared by every blueprint.

    success: {"success": true, "data": ...}
    failure: {"success": false, "message": "...", "details": {...}}

Known ledger errors carry their own HTTP status (404 not found, 400
validation and insufficient stock, 409 conflict, 500 aborted transaction).
"""

from __future__ import annotations

from flask import current_app, jsonify

from .services.errors import LedgerError, TransactionAbortedError
from .validation import ConflictError, ValidationError


LEDGER_ERRORS = (LedgerError, ValidationError, ConflictError)


def success(data=None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def failure(message: str, status: int, details: dict | None = None):
    body = {"success": False, "message": message}
    if details:
        body["details"] = details
    return jsonify(body), status


def ledger_failure(exc: Exception):
    """Map a known ledger/validation error to its envelope and status."""
    if isinstance(exc, TransactionAbortedError):
        current_app.logger.warning("Transaction aborted after retries: %s", exc.details)
    return failure(str(exc), getattr(exc, "status_code", 500), getattr(exc, "details", None))


def server_error():
    return failure("Internal server error", 500)
