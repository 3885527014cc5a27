# backend/depot/routes/orders.py
"""
Order API Routes

DESIGN:
- POST creates the order, deducts stock and refreshes the wallet in one
  transaction
- PUT edits status/delivery/notes only
- DELETE restocks, removes linked payments and refreshes the wallet
"""

from flask import Blueprint, request, current_app

from ..models.orders import ORDER_STATUSES
from ..responses import LEDGER_ERRORS, ledger_failure, server_error, success
from ..schemas import CreateOrderRequest, UpdateOrderRequest
from ..services import order_service
from ..validation import coerce_choice, coerce_int


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("/")
def list_orders_route():
    """
    List orders, newest first.

    Query params:
    - customer_id
    - status: PENDING, PROCESSING, COMPLETED, CANCELLED
    - payment_status: UNPAID, PARTIAL, PAID
    """
    try:
        orders = order_service.list_orders(
            customer_id=coerce_int("customer_id", request.args.get("customer_id")),
            status=coerce_choice("status", request.args.get("status"), ORDER_STATUSES),
            payment_status=coerce_choice(
                "payment_status", request.args.get("payment_status"), ("UNPAID", "PARTIAL", "PAID")
            ),
        )
        return success({
            "orders": [o.to_dict(include_lines=False) for o in orders],
            "stats": order_service.order_stats(orders),
        })
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return server_error()


@orders_bp.post("/")
def create_order_route():
    """
    Create an order.

    Request body:
    {
        "customer_id": 1,
        "lines": [{"inventory_item_id": 3, "quantity": 2, "unit_price_cents": 4500000}],
        "discount_cents": 0,
        "amount_paid_cents": 0,
        "delivery_address": "...",
        "delivery_date": "2026-10-20",
        "notes": "...",
        "created_by": "System"
    }

    Returns:
        201: Order created
        400: Invalid input or insufficient stock
        404: Customer or item not found
    """
    try:
        req = CreateOrderRequest.from_payload(request.get_json(silent=True))
        order = order_service.create_order(req)
        current_app.logger.info(
            "Order %s created for customer %s (total_cents=%s)",
            order.order_number, order.customer_id, order.total_cents,
        )
        return success(order.to_dict(), 201)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return server_error()


@orders_bp.get("/<int:order_id>")
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        data = order.to_dict()
        data["customer"] = {
            "id": order.customer.id,
            "name": order.customer.name,
            "phone": order.customer.phone,
            "business_name": order.customer.business_name,
        }
        return success(data)
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to load order")
        return server_error()


@orders_bp.put("/<int:order_id>")
def update_order_route(order_id: int):
    """Status/delivery/notes edit. Financial fields are rejected with 400."""
    try:
        req = UpdateOrderRequest.from_payload(request.get_json(silent=True))
        order = order_service.update_order_status(order_id, req)
        return success(order.to_dict())
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to update order")
        return server_error()


@orders_bp.delete("/<int:order_id>")
def delete_order_route(order_id: int):
    try:
        result = order_service.delete_order(order_id)
        current_app.logger.info(
            "Order %s deleted: %s payments removed, %s lines restocked",
            order_id, result["deleted_payment_count"], result["restored_item_count"],
        )
        return success({"message": "Order deleted successfully", **result})
    except LEDGER_ERRORS as e:
        return ledger_failure(e)
    except Exception:
        current_app.logger.exception("Failed to delete order")
        return server_error()
