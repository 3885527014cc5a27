from __future__ import annotations


class LedgerError(Exception):
    """Base class for ledger operation errors."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(LedgerError):
    status_code = 404


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id):
        super().__init__("Customer not found", {"customer_id": customer_id})


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id):
        super().__init__("Order not found", {"order_id": order_id})


class ItemNotFoundError(NotFoundError):
    def __init__(self, item_id):
        super().__init__(f"Inventory item {item_id} not found", {"inventory_item_id": item_id})


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id):
        super().__init__("Payment not found", {"payment_id": payment_id})


class RecordNotFoundError(NotFoundError):
    """Expense or tax record lookup miss."""
    def __init__(self, kind: str, record_id):
        super().__init__(f"{kind} not found", {"id": record_id})


class InsufficientStockError(LedgerError):
    """Requested quantity exceeds what is on hand."""
    status_code = 400

    def __init__(self, item_name: str, available: int, requested: int, item_id: int | None = None):
        super().__init__(
            f"Insufficient stock for {item_name}. Available: {available}, Requested: {requested}",
            {
                "inventory_item_id": item_id,
                "item_name": item_name,
                "available": available,
                "requested": requested,
            },
        )
        self.item_name = item_name
        self.available = available
        self.requested = requested


class TransactionAbortedError(LedgerError):
    """Retries exhausted on lock or version conflicts. Nothing was committed."""
    status_code = 500

    def __init__(self, message: str = "Transaction aborted due to concurrent updates; safe to retry", details: dict | None = None):
        super().__init__(message, details)
