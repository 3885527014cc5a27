"""
Inventory Stock Ledger

On-hand quantity per item. Quantity only moves through this module:
- deduct_stock(): conditional decrement used by order creation
- restock(): increment used by order deletion
- adjust_stock(): explicit correction (receiving goods, write-offs)

The decrement is a compare-and-swap UPDATE guarded by quantity >= n, so
two concurrent orders can never drive stock below zero even when both
passed the advisory availability check.
"""

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import InventoryItem, OrderLine
from ..models.inventory import STOCK_IN, STOCK_LOW, STOCK_OUT
from ..schemas import AdjustStockRequest, CreateItemRequest, UpdateItemRequest
from ..validation import ValidationError
from .concurrency import begin_write_transaction, run_with_retry
from .errors import InsufficientStockError, ItemNotFoundError


def get_item(item_id: int) -> InventoryItem:
    item = db.session.get(InventoryItem, item_id)
    if not item:
        raise ItemNotFoundError(item_id)
    return item


def list_items(*, category: str | None = None, stock_status: str | None = None) -> list[InventoryItem]:
    query = db.session.query(InventoryItem)
    if category:
        query = query.filter(InventoryItem.category == category)
    if stock_status == STOCK_OUT:
        query = query.filter(InventoryItem.quantity <= 0)
    elif stock_status == STOCK_LOW:
        query = query.filter(InventoryItem.quantity > 0, InventoryItem.quantity <= InventoryItem.reorder_level)
    elif stock_status == STOCK_IN:
        query = query.filter(InventoryItem.quantity > InventoryItem.reorder_level)
    return query.order_by(InventoryItem.item_name, InventoryItem.brand, InventoryItem.id).all()


def create_item(request: CreateItemRequest) -> InventoryItem:
    def _op():
        item = InventoryItem(
            item_name=request.item_name,
            brand=request.brand,
            category=request.category,
            unit=request.unit,
            quantity=request.quantity,
            unit_price_cents=request.unit_price_cents,
            reorder_level=request.reorder_level,
            location=request.location,
            supplier_name=request.supplier_name,
            supplier_contact=request.supplier_contact,
        )
        db.session.add(item)
        db.session.commit()
        return item

    return run_with_retry(_op)


def update_item(item_id: int, request: UpdateItemRequest) -> InventoryItem:
    """Edit descriptive fields and price. Existing order lines keep their snapshot."""
    def _op():
        item = get_item(item_id)
        for key, value in request.changes().items():
            setattr(item, key, value)
        db.session.commit()
        return item

    return run_with_retry(_op)


def delete_item(item_id: int) -> None:
    """
    Delete an item.

    Order lines referencing it keep their snapshot and lose the link, so
    deleting those orders later restocks nothing for this line.
    """
    def _op():
        begin_write_transaction()
        item = get_item(item_id)
        db.session.execute(
            update(OrderLine)
            .where(OrderLine.inventory_item_id == item.id)
            .values(inventory_item_id=None)
        )
        db.session.delete(item)
        db.session.commit()

    run_with_retry(_op)


def deduct_stock(item_id: int, quantity: int) -> None:
    """
    Conditionally decrement stock inside the caller's transaction.

    Raises InsufficientStockError when the row no longer holds `quantity`
    units (zero rows matched the guarded UPDATE).
    """
    if quantity <= 0:
        raise ValidationError("quantity must be > 0")

    result = db.session.execute(
        update(InventoryItem)
        .where(InventoryItem.id == item_id, InventoryItem.quantity >= quantity)
        .values(quantity=InventoryItem.quantity - quantity)
    )
    if not result.rowcount:
        item = db.session.get(InventoryItem, item_id, populate_existing=True)
        if not item:
            raise ItemNotFoundError(item_id)
        raise InsufficientStockError(item.display_name, item.quantity, quantity, item_id=item.id)


def restock(item_id: int, quantity: int) -> bool:
    """
    Return `quantity` units to an item inside the caller's transaction.

    Returns False when the item no longer exists (nothing to restore).
    """
    if quantity <= 0:
        raise ValidationError("quantity must be > 0")

    result = db.session.execute(
        update(InventoryItem)
        .where(InventoryItem.id == item_id)
        .values(quantity=InventoryItem.quantity + quantity)
    )
    return bool(result.rowcount)


def adjust_stock(item_id: int, request: AdjustStockRequest) -> InventoryItem:
    """Apply a signed stock correction; refuses to go below zero."""
    def _op():
        begin_write_transaction()
        item = get_item(item_id)
        if request.delta > 0:
            restock(item.id, request.delta)
        else:
            deduct_stock(item.id, -request.delta)
        db.session.commit()
        db.session.refresh(item)
        return item

    return run_with_retry(_op)
