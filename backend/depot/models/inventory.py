from __future__ import annotations

from ..extensions import db
from depot.time_utils import to_utc_z, utcnow


INVENTORY_CATEGORIES = ("RICE", "SPAGHETTI", "OIL", "BEANS", "INDOMIE", "OTHER")
INVENTORY_UNITS = ("BAG", "CARTON", "GALLON", "KG", "PIECES", "PACK", "CRATE", "OTHER")

STOCK_IN = "IN_STOCK"
STOCK_LOW = "LOW_STOCK"
STOCK_OUT = "OUT_OF_STOCK"


class InventoryItem(db.Model):
    """
    Warehouse stock item.

    Quantity is a mutable on-hand counter. It only moves through
    inventory_service (conditional decrement on order creation, restock on
    order deletion, explicit adjustments) and can never go below zero.

    Order lines copy name/brand/unit/price at creation time, so edits here
    never rewrite existing orders.
    """
    __tablename__ = "inventory_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
        db.Index("ix_inventory_items_name_brand", "item_name", "brand"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    item_name = db.Column(db.String(255), nullable=False)
    brand = db.Column(db.String(128), nullable=False)
    category = db.Column(db.String(32), nullable=False, index=True)
    unit = db.Column(db.String(16), nullable=False)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    reorder_level = db.Column(db.Integer, nullable=False, default=10)

    location = db.Column(db.String(255), nullable=False)
    supplier_name = db.Column(db.String(255), nullable=False)
    supplier_contact = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def stock_status(self) -> str:
        if self.quantity <= 0:
            return STOCK_OUT
        if self.quantity <= self.reorder_level:
            return STOCK_LOW
        return STOCK_IN

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.item_name}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_name": self.item_name,
            "brand": self.brand,
            "category": self.category,
            "unit": self.unit,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "reorder_level": self.reorder_level,
            "stock_status": self.stock_status,
            "location": self.location,
            "supplier": {
                "name": self.supplier_name,
                "contact": self.supplier_contact,
            },
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
