from __future__ import annotations

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import DocumentSequence
from depot.time_utils import period_code


DOCUMENT_PREFIXES = {
    "ORDER": "ORD",
    "PAYMENT": "PAY",
    "EXPENSE": "EXP",
    "TAX": "TAX",
}


class DocumentSequenceError(Exception):
    """Raised when document sequence operations fail."""
    pass


def _current_next(document_type: str, period: str) -> int:
    return (
        db.session.query(DocumentSequence.next_number)
        .filter_by(document_type=document_type, period=period)
        .scalar()
    )


def next_document_number(
    document_type: str,
    *,
    when: datetime | None = None,
    pad: int = 5,
) -> str:
    """
    Allocate the next number for a document type in the current period.

    Format: PREFIX-YYMM-NNNNN (e.g. ORD-2610-00001). The sequence restarts
    every calendar month.

    Runs inside the caller's transaction so the number is released again if
    the surrounding write rolls back. The counter moves with a single
    UPDATE ... SET next_number = next_number + 1, which two writers cannot
    interleave.
    """
    prefix = DOCUMENT_PREFIXES.get(document_type)
    if not prefix:
        raise DocumentSequenceError(f"Unknown document_type: {document_type}")

    period = period_code(when)

    stmt = (
        update(DocumentSequence)
        .where(
            DocumentSequence.document_type == document_type,
            DocumentSequence.period == period,
        )
        .values(next_number=DocumentSequence.next_number + 1)
    )

    result = db.session.execute(stmt)
    if result.rowcount:
        next_num = _current_next(document_type, period) - 1
    else:
        try:
            with db.session.begin_nested():
                db.session.add(DocumentSequence(document_type=document_type, period=period, next_number=2))
            next_num = 1
        except IntegrityError:
            # Another writer created the period row first
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise
            next_num = _current_next(document_type, period) - 1

    return f"{prefix}-{period}-{next_num:0{pad}d}"
