# backend/depot/routes/inventory.py
"""
Inventory API Routes

Quantity is not editable through PUT; use POST /<id>/adjust with a signed
delta so stock can never be set below zero.
"""

from flask import Blueprint, request, current_app

from ..models.inventory import INVENTORY_CATEGORIES, STOCK_IN, STOCK_LOW, STOCK_OUT
from ..responses import LEDGER_ERRORS, ledger_failure, server_error, success
from ..schemas import AdjustStockRequest, CreateItemRequest, UpdateItemRequest
from ..services import inventory_service
from ..validation import coerce_choice


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/")
def list_items_route():
    try:
        items = inventory_service.list_items(
            category=coerce_choice("category", request.args.get("category"), INVENTORY_CATEGORIES),
            stock_status=coerce_choice(
                "stock_status", request.args.get("stock_status"), (STOCK_IN, STOCK_LOW, STOCK_OUT)
            ),
        )
        return success({
            "items": [i.to_dict() for i in items],
            "stats": {
                "item_count": len(items),
                "total_value_cents": sum(i.quantity * i.unit_price_cents for i in items),
                "low_stock_count": sum(1 for i in items if i.stock_status == STOCK_LOW),
                "out_of_stock_count": sum(1 for i in items if i.stock_status == STOCK_OUT),
            },
        })
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to list inventory")
        return server_error()


@inventory_bp.post("/")
def create_item_route():
    try:
        req = CreateItemRequest.from_payload(request.get_json(silent=True))
        item = inventory_service.create_item(req)
        return success(item.to_dict(), 201)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to create inventory item")
        return server_error()


@inventory_bp.get("/<int:item_id>")
def get_item_route(item_id: int):
    try:
        return success(inventory_service.get_item(item_id).to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to load inventory item")
        return server_error()


@inventory_bp.put("/<int:item_id>")
def update_item_route(item_id: int):
    try:
        req = UpdateItemRequest.from_payload(request.get_json(silent=True))
        item = inventory_service.update_item(item_id, req)
        return success(item.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to update inventory item")
        return server_error()


@inventory_bp.delete("/<int:item_id>")
def delete_item_route(item_id: int):
    try:
        inventory_service.delete_item(item_id)
        return success({"message": "Inventory item deleted successfully", "inventory_item_id": item_id})
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to delete inventory item")
        return server_error()


@inventory_bp.post("/<int:item_id>/adjust")
def adjust_stock_route(item_id: int):
    """
    Request body:
    {
        "delta": -5,
        "reason": "Damaged in transit"
    }
    """
    try:
        req = AdjustStockRequest.from_payload(request.get_json(silent=True))
        item = inventory_service.adjust_stock(item_id, req)
        current_app.logger.info(
            "Stock adjusted for item %s by %s (%s)", item.id, req.delta, req.reason or "no reason given"
        )
        return success(item.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return server_error()
