from __future__ import annotations

from ..extensions import db


class DocumentSequence(db.Model):
    """
    Per (document_type, period) counter backing human-readable numbers
    such as ORD-2610-00001.

    next_number is the number the NEXT allocation will return. Rows are
    created lazily on first use of a period.
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("document_type", "period", name="uq_document_sequences_type_period"),
    )

    id = db.Column(db.Integer, primary_key=True)
    document_type = db.Column(db.String(16), nullable=False)
    period = db.Column(db.String(8), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
