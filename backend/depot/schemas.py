"""
Typed request objects for the ledger services.

Each request is a frozen dataclass built from a JSON payload by
``from_payload``. Parsing applies the strict coercion rules in
depot.validation, so services receive clean integers, datetimes and
upper-case enum values and never look at raw request data.

Update requests carry a ``provided`` set: only keys present in the
payload are applied, which keeps "field omitted" distinct from "field
cleared to null".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .models.back_office import (
    EXPENSE_CATEGORIES,
    EXPENSE_STATUSES,
    TAX_PAYMENT_METHODS,
    TAX_STATUSES,
    TAX_TYPES,
)
from .models.customers import CUSTOMER_STATUSES, CUSTOMER_TYPES
from .models.inventory import INVENTORY_CATEGORIES, INVENTORY_UNITS
from .models.orders import DELIVERY_STATUSES, ORDER_STATUSES
from .models.payments import PAYMENT_METHODS, PAYMENT_STATUSES
from .validation import (
    ValidationError,
    coerce_amount,
    coerce_bool,
    coerce_choice,
    coerce_datetime,
    coerce_int,
    coerce_str,
    ensure_payload,
    reject_unknown_fields,
    require_fields,
)


def _nested(payload: dict, key: str) -> dict:
    value = payload.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValidationError(f"{key} must be an object")
    return value


def _changes(obj, provided: frozenset[str]) -> dict[str, Any]:
    return {name: getattr(obj, name) for name in sorted(provided)}


# =============================================================================
# Customers
# =============================================================================

CUSTOMER_FIELDS = {
    "name", "phone", "email", "business_name", "address", "customer_type",
    "credit_limit_cents", "old_balance_cents", "status", "notes",
}
ADDRESS_FIELDS = {"street", "city", "state", "country"}


@dataclass(frozen=True)
class CreateCustomerRequest:
    name: str
    phone: str
    street: str
    city: str
    state: str
    customer_type: str
    country: str = "Nigeria"
    email: str | None = None
    business_name: str | None = None
    credit_limit_cents: int = 0
    old_balance_cents: int = 0
    status: str = "ACTIVE"
    notes: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateCustomerRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, CUSTOMER_FIELDS)
        require_fields(payload, ("name", "phone", "customer_type"))
        address = _nested(payload, "address")
        reject_unknown_fields(address, ADDRESS_FIELDS)

        return cls(
            name=coerce_str("name", payload.get("name"), max_length=255, required=True),
            phone=coerce_str("phone", payload.get("phone"), max_length=32, required=True),
            street=coerce_str("address.street", address.get("street"), max_length=255, required=True),
            city=coerce_str("address.city", address.get("city"), max_length=128, required=True),
            state=coerce_str("address.state", address.get("state"), max_length=128, required=True),
            country=coerce_str("address.country", address.get("country"), max_length=128) or "Nigeria",
            customer_type=coerce_choice("customer_type", payload.get("customer_type"), CUSTOMER_TYPES),
            email=coerce_str("email", payload.get("email"), max_length=255),
            business_name=coerce_str("business_name", payload.get("business_name"), max_length=255),
            credit_limit_cents=coerce_amount("credit_limit_cents", payload.get("credit_limit_cents")) or 0,
            old_balance_cents=coerce_amount("old_balance_cents", payload.get("old_balance_cents")) or 0,
            status=coerce_choice("status", payload.get("status"), CUSTOMER_STATUSES) or "ACTIVE",
            notes=coerce_str("notes", payload.get("notes")),
        )


@dataclass(frozen=True)
class UpdateCustomerRequest:
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    business_name: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    customer_type: str | None = None
    credit_limit_cents: int | None = None
    status: str | None = None
    notes: str | None = None
    old_balance_cents: int | None = None
    provided: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateCustomerRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, CUSTOMER_FIELDS)
        address = _nested(payload, "address")
        reject_unknown_fields(address, ADDRESS_FIELDS)

        values: dict[str, Any] = {}
        for key, max_length in (("name", 255), ("phone", 32)):
            if key in payload:
                values[key] = coerce_str(key, payload[key], max_length=max_length, required=True)
        for key, max_length in (("street", 255), ("city", 128), ("state", 128), ("country", 128)):
            if key in address:
                values[key] = coerce_str(f"address.{key}", address[key], max_length=max_length, required=True)
        for key in ("email", "business_name", "notes"):
            if key in payload:
                values[key] = coerce_str(key, payload[key], max_length=None if key == "notes" else 255)
        if "customer_type" in payload:
            values["customer_type"] = coerce_choice("customer_type", payload["customer_type"], CUSTOMER_TYPES)
        if "status" in payload:
            values["status"] = coerce_choice("status", payload["status"], CUSTOMER_STATUSES)
        if "credit_limit_cents" in payload:
            values["credit_limit_cents"] = coerce_amount("credit_limit_cents", payload["credit_limit_cents"])
        if "old_balance_cents" in payload:
            values["old_balance_cents"] = coerce_amount("old_balance_cents", payload["old_balance_cents"])

        for key in ("customer_type", "status", "credit_limit_cents"):
            if key in values and values[key] is None:
                raise ValidationError(f"{key} cannot be null")

        return cls(provided=frozenset(values), **values)

    def changes(self) -> dict[str, Any]:
        return _changes(self, self.provided)


# =============================================================================
# Inventory
# =============================================================================

ITEM_FIELDS = {
    "item_name", "brand", "category", "unit", "quantity", "unit_price_cents",
    "reorder_level", "location", "supplier",
}
SUPPLIER_FIELDS = {"name", "contact"}


@dataclass(frozen=True)
class CreateItemRequest:
    item_name: str
    brand: str
    category: str
    unit: str
    unit_price_cents: int
    location: str
    supplier_name: str
    supplier_contact: str
    quantity: int = 0
    reorder_level: int = 10

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateItemRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, ITEM_FIELDS)
        require_fields(payload, ("item_name", "brand", "category", "unit", "unit_price_cents", "location"))
        supplier = _nested(payload, "supplier")
        reject_unknown_fields(supplier, SUPPLIER_FIELDS)

        reorder_level = coerce_int("reorder_level", payload.get("reorder_level"))
        if reorder_level is not None and reorder_level < 0:
            raise ValidationError("reorder_level must be >= 0")

        return cls(
            item_name=coerce_str("item_name", payload.get("item_name"), max_length=255, required=True),
            brand=coerce_str("brand", payload.get("brand"), max_length=128, required=True),
            category=coerce_choice("category", payload.get("category"), INVENTORY_CATEGORIES),
            unit=coerce_choice("unit", payload.get("unit"), INVENTORY_UNITS),
            unit_price_cents=coerce_amount("unit_price_cents", payload.get("unit_price_cents")),
            location=coerce_str("location", payload.get("location"), max_length=255, required=True),
            supplier_name=coerce_str("supplier.name", supplier.get("name"), max_length=255, required=True),
            supplier_contact=coerce_str("supplier.contact", supplier.get("contact"), max_length=255, required=True),
            quantity=coerce_amount("quantity", payload.get("quantity")) or 0,
            reorder_level=10 if reorder_level is None else reorder_level,
        )


@dataclass(frozen=True)
class UpdateItemRequest:
    item_name: str | None = None
    brand: str | None = None
    category: str | None = None
    unit: str | None = None
    unit_price_cents: int | None = None
    reorder_level: int | None = None
    location: str | None = None
    supplier_name: str | None = None
    supplier_contact: str | None = None
    provided: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateItemRequest":
        payload = ensure_payload(payload)
        if "quantity" in payload:
            raise ValidationError("quantity cannot be edited directly; use a stock adjustment")
        reject_unknown_fields(payload, ITEM_FIELDS)
        supplier = _nested(payload, "supplier")
        reject_unknown_fields(supplier, SUPPLIER_FIELDS)

        values: dict[str, Any] = {}
        for key in ("item_name", "brand", "location"):
            if key in payload:
                values[key] = coerce_str(key, payload[key], max_length=255, required=True)
        if "name" in supplier:
            values["supplier_name"] = coerce_str("supplier.name", supplier["name"], max_length=255, required=True)
        if "contact" in supplier:
            values["supplier_contact"] = coerce_str("supplier.contact", supplier["contact"], max_length=255, required=True)
        if "category" in payload:
            values["category"] = coerce_choice("category", payload["category"], INVENTORY_CATEGORIES)
        if "unit" in payload:
            values["unit"] = coerce_choice("unit", payload["unit"], INVENTORY_UNITS)
        if "unit_price_cents" in payload:
            values["unit_price_cents"] = coerce_amount("unit_price_cents", payload["unit_price_cents"])
        if "reorder_level" in payload:
            values["reorder_level"] = coerce_amount("reorder_level", payload["reorder_level"])

        for key, value in values.items():
            if value is None:
                raise ValidationError(f"{key} cannot be null")

        return cls(provided=frozenset(values), **values)

    def changes(self) -> dict[str, Any]:
        return _changes(self, self.provided)


@dataclass(frozen=True)
class AdjustStockRequest:
    delta: int
    reason: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "AdjustStockRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, {"delta", "reason"})
        require_fields(payload, ("delta",))
        delta = coerce_int("delta", payload.get("delta"))
        if delta == 0:
            raise ValidationError("delta must be non-zero")
        return cls(delta=delta, reason=coerce_str("reason", payload.get("reason"), max_length=255))


# =============================================================================
# Orders
# =============================================================================

ORDER_FIELDS = {
    "customer_id", "lines", "discount_cents", "amount_paid_cents",
    "delivery_address", "delivery_date", "notes", "created_by", "status",
}
ORDER_LINE_FIELDS = {"inventory_item_id", "quantity", "unit_price_cents"}
ORDER_UPDATE_FIELDS = {"status", "delivery_status", "delivery_address", "delivery_date", "notes"}


@dataclass(frozen=True)
class OrderLineInput:
    inventory_item_id: int
    quantity: int
    unit_price_cents: int | None = None


@dataclass(frozen=True)
class CreateOrderRequest:
    customer_id: int
    lines: tuple[OrderLineInput, ...]
    discount_cents: int = 0
    amount_paid_cents: int = 0
    status: str = "PENDING"
    delivery_address: str | None = None
    delivery_date: datetime | None = None
    notes: str | None = None
    created_by: str = "System"

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateOrderRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, ORDER_FIELDS)
        require_fields(payload, ("customer_id",))

        raw_lines = payload.get("lines")
        if not isinstance(raw_lines, list) or not raw_lines:
            raise ValidationError("Order must have at least one line")

        lines = []
        for index, raw in enumerate(raw_lines):
            if not isinstance(raw, dict):
                raise ValidationError(f"lines[{index}] must be an object")
            reject_unknown_fields(raw, ORDER_LINE_FIELDS)
            require_fields(raw, ("inventory_item_id", "quantity"))
            lines.append(OrderLineInput(
                inventory_item_id=coerce_int(f"lines[{index}].inventory_item_id", raw.get("inventory_item_id")),
                quantity=coerce_int(f"lines[{index}].quantity", raw.get("quantity")),
                unit_price_cents=coerce_amount(f"lines[{index}].unit_price_cents", raw.get("unit_price_cents")),
            ))

        return cls(
            customer_id=coerce_int("customer_id", payload.get("customer_id")),
            lines=tuple(lines),
            discount_cents=coerce_int("discount_cents", payload.get("discount_cents")) or 0,
            amount_paid_cents=coerce_int("amount_paid_cents", payload.get("amount_paid_cents")) or 0,
            status=coerce_choice("status", payload.get("status"), ORDER_STATUSES) or "PENDING",
            delivery_address=coerce_str("delivery_address", payload.get("delivery_address"), max_length=512),
            delivery_date=coerce_datetime("delivery_date", payload.get("delivery_date")),
            notes=coerce_str("notes", payload.get("notes")),
            created_by=coerce_str("created_by", payload.get("created_by"), max_length=128) or "System",
        )


@dataclass(frozen=True)
class UpdateOrderRequest:
    status: str | None = None
    delivery_status: str | None = None
    delivery_address: str | None = None
    delivery_date: datetime | None = None
    notes: str | None = None
    provided: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateOrderRequest":
        payload = ensure_payload(payload)
        financial = sorted(k for k in payload if k not in ORDER_UPDATE_FIELDS)
        if financial:
            raise ValidationError(
                "Only status, delivery and notes fields can be edited on an order",
                {"rejected_fields": financial},
            )

        values: dict[str, Any] = {}
        if "status" in payload:
            values["status"] = coerce_choice("status", payload["status"], ORDER_STATUSES)
        if "delivery_status" in payload:
            values["delivery_status"] = coerce_choice("delivery_status", payload["delivery_status"], DELIVERY_STATUSES)
        if "delivery_address" in payload:
            values["delivery_address"] = coerce_str("delivery_address", payload["delivery_address"], max_length=512)
        if "delivery_date" in payload:
            values["delivery_date"] = coerce_datetime("delivery_date", payload["delivery_date"])
        if "notes" in payload:
            values["notes"] = coerce_str("notes", payload["notes"])

        for key in ("status", "delivery_status"):
            if key in values and values[key] is None:
                raise ValidationError(f"{key} cannot be null")

        return cls(provided=frozenset(values), **values)

    def changes(self) -> dict[str, Any]:
        return _changes(self, self.provided)


# =============================================================================
# Payments
# =============================================================================

PAYMENT_FIELDS = {
    "customer_id", "order_id", "amount_cents", "payment_method", "payment_date",
    "reference_number", "bank_name", "notes", "status", "received_by",
}
PAYMENT_UPDATE_FIELDS = {"reference_number", "bank_name", "notes", "status"}


@dataclass(frozen=True)
class RecordPaymentRequest:
    customer_id: int
    amount_cents: int
    payment_method: str
    order_id: int | None = None
    payment_date: datetime | None = None
    reference_number: str | None = None
    bank_name: str | None = None
    notes: str | None = None
    status: str = "CONFIRMED"
    received_by: str = "System"

    @classmethod
    def from_payload(cls, payload: Any) -> "RecordPaymentRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, PAYMENT_FIELDS)
        require_fields(payload, ("customer_id", "amount_cents", "payment_method"))

        return cls(
            customer_id=coerce_int("customer_id", payload.get("customer_id")),
            amount_cents=coerce_amount("amount_cents", payload.get("amount_cents"), minimum=1),
            payment_method=coerce_choice("payment_method", payload.get("payment_method"), PAYMENT_METHODS),
            order_id=coerce_int("order_id", payload.get("order_id")),
            payment_date=coerce_datetime("payment_date", payload.get("payment_date")),
            reference_number=coerce_str("reference_number", payload.get("reference_number"), max_length=128),
            bank_name=coerce_str("bank_name", payload.get("bank_name"), max_length=128),
            notes=coerce_str("notes", payload.get("notes")),
            status=coerce_choice("status", payload.get("status"), PAYMENT_STATUSES) or "CONFIRMED",
            received_by=coerce_str("received_by", payload.get("received_by"), max_length=128) or "System",
        )


@dataclass(frozen=True)
class UpdatePaymentRequest:
    reference_number: str | None = None
    bank_name: str | None = None
    notes: str | None = None
    status: str | None = None
    provided: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdatePaymentRequest":
        payload = ensure_payload(payload)
        rejected = sorted(k for k in payload if k not in PAYMENT_UPDATE_FIELDS)
        if rejected:
            raise ValidationError(
                "Payment amount, customer and order cannot be changed",
                {"rejected_fields": rejected},
            )

        values: dict[str, Any] = {}
        for key in ("reference_number", "bank_name"):
            if key in payload:
                values[key] = coerce_str(key, payload[key], max_length=128)
        if "notes" in payload:
            values["notes"] = coerce_str("notes", payload["notes"])
        if "status" in payload:
            values["status"] = coerce_choice("status", payload["status"], PAYMENT_STATUSES)
            if values["status"] is None:
                raise ValidationError("status cannot be null")

        return cls(provided=frozenset(values), **values)

    def changes(self) -> dict[str, Any]:
        return _changes(self, self.provided)


# =============================================================================
# Expenses
# =============================================================================

EXPENSE_FIELDS = {
    "category", "description", "amount_cents", "vendor", "payment_method",
    "expense_date", "reference_number", "invoice_number", "status",
    "tax_deductible", "notes", "recorded_by",
}
VENDOR_FIELDS = {"name", "contact"}


def _expense_values(payload: dict, *, partial: bool) -> dict[str, Any]:
    vendor = _nested(payload, "vendor")
    reject_unknown_fields(vendor, VENDOR_FIELDS)

    values: dict[str, Any] = {}
    if not partial or "category" in payload:
        values["category"] = coerce_choice("category", payload.get("category"), EXPENSE_CATEGORIES)
    if not partial or "description" in payload:
        values["description"] = coerce_str("description", payload.get("description"), max_length=512, required=True)
    if not partial or "amount_cents" in payload:
        values["amount_cents"] = coerce_amount("amount_cents", payload.get("amount_cents"))
    if not partial or "payment_method" in payload:
        values["payment_method"] = coerce_choice("payment_method", payload.get("payment_method"), PAYMENT_METHODS)
    if "name" in vendor:
        values["vendor_name"] = coerce_str("vendor.name", vendor["name"], max_length=255)
    if "contact" in vendor:
        values["vendor_contact"] = coerce_str("vendor.contact", vendor["contact"], max_length=255)
    if "expense_date" in payload:
        values["expense_date"] = coerce_datetime("expense_date", payload["expense_date"])
    for key in ("reference_number", "invoice_number"):
        if key in payload:
            values[key] = coerce_str(key, payload[key], max_length=128)
    if "status" in payload:
        values["status"] = coerce_choice("status", payload["status"], EXPENSE_STATUSES)
    if "tax_deductible" in payload:
        values["tax_deductible"] = coerce_bool("tax_deductible", payload["tax_deductible"])
    if "notes" in payload:
        values["notes"] = coerce_str("notes", payload["notes"])
    if "recorded_by" in payload:
        values["recorded_by"] = coerce_str("recorded_by", payload["recorded_by"], max_length=128)

    for key in ("category", "amount_cents", "payment_method", "status", "tax_deductible", "expense_date", "recorded_by"):
        if key in values and values[key] is None:
            raise ValidationError(f"{key} cannot be null")
    return values


@dataclass(frozen=True)
class CreateExpenseRequest:
    category: str
    description: str
    amount_cents: int
    payment_method: str
    vendor_name: str | None = None
    vendor_contact: str | None = None
    expense_date: datetime | None = None
    reference_number: str | None = None
    invoice_number: str | None = None
    status: str = "PAID"
    tax_deductible: bool = False
    notes: str | None = None
    recorded_by: str = "System"

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateExpenseRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, EXPENSE_FIELDS)
        require_fields(payload, ("category", "description", "amount_cents", "payment_method"))
        return cls(**_expense_values(payload, partial=False))


@dataclass(frozen=True)
class UpdateExpenseRequest:
    category: str | None = None
    description: str | None = None
    amount_cents: int | None = None
    payment_method: str | None = None
    vendor_name: str | None = None
    vendor_contact: str | None = None
    expense_date: datetime | None = None
    reference_number: str | None = None
    invoice_number: str | None = None
    status: str | None = None
    tax_deductible: bool | None = None
    notes: str | None = None
    recorded_by: str | None = None
    provided: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateExpenseRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, EXPENSE_FIELDS)
        values = _expense_values(payload, partial=True)
        return cls(provided=frozenset(values), **values)

    def changes(self) -> dict[str, Any]:
        return _changes(self, self.provided)


# =============================================================================
# Taxes
# =============================================================================

TAX_FIELDS = {
    "tax_type", "period", "taxable_amount_cents", "tax_rate_bps", "due_date",
    "payment_date", "status", "payment_reference", "payment_method", "notes",
    "recorded_by",
}
PERIOD_FIELDS = {"year", "month", "quarter"}


def _ranged(field_name: str, value: Any, low: int, high: int) -> int | None:
    number = coerce_int(field_name, value)
    if number is not None and not (low <= number <= high):
        raise ValidationError(f"{field_name} must be between {low} and {high}")
    return number


def _tax_values(payload: dict, *, partial: bool) -> dict[str, Any]:
    values: dict[str, Any] = {}
    if "period" in payload or not partial:
        period = _nested(payload, "period")
        reject_unknown_fields(period, PERIOD_FIELDS)
        values["period_year"] = _ranged("period.year", period.get("year"), 2000, 2100)
        if values["period_year"] is None:
            raise ValidationError("period.year is required")
        values["period_month"] = _ranged("period.month", period.get("month"), 1, 12)
        values["period_quarter"] = _ranged("period.quarter", period.get("quarter"), 1, 4)
    if not partial or "tax_type" in payload:
        values["tax_type"] = coerce_choice("tax_type", payload.get("tax_type"), TAX_TYPES)
    if not partial or "taxable_amount_cents" in payload:
        values["taxable_amount_cents"] = coerce_amount("taxable_amount_cents", payload.get("taxable_amount_cents"))
    if not partial or "tax_rate_bps" in payload:
        values["tax_rate_bps"] = _ranged("tax_rate_bps", payload.get("tax_rate_bps"), 0, 10000)
    if not partial or "due_date" in payload:
        values["due_date"] = coerce_datetime("due_date", payload.get("due_date"))
    if "payment_date" in payload:
        values["payment_date"] = coerce_datetime("payment_date", payload["payment_date"])
    if "status" in payload:
        values["status"] = coerce_choice("status", payload["status"], TAX_STATUSES)
    if "payment_method" in payload:
        values["payment_method"] = coerce_choice("payment_method", payload["payment_method"], TAX_PAYMENT_METHODS)
    if "payment_reference" in payload:
        values["payment_reference"] = coerce_str("payment_reference", payload["payment_reference"], max_length=128)
    if "notes" in payload:
        values["notes"] = coerce_str("notes", payload["notes"])
    if "recorded_by" in payload:
        values["recorded_by"] = coerce_str("recorded_by", payload["recorded_by"], max_length=128)

    for key in ("tax_type", "taxable_amount_cents", "tax_rate_bps", "due_date", "status", "recorded_by"):
        if key in values and values[key] is None:
            raise ValidationError(f"{key} cannot be null")
    return values


@dataclass(frozen=True)
class CreateTaxRequest:
    tax_type: str
    period_year: int
    taxable_amount_cents: int
    tax_rate_bps: int
    due_date: datetime
    period_month: int | None = None
    period_quarter: int | None = None
    payment_date: datetime | None = None
    status: str = "PENDING"
    payment_reference: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    recorded_by: str = "System"

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateTaxRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, TAX_FIELDS)
        require_fields(payload, ("tax_type", "period", "taxable_amount_cents", "tax_rate_bps", "due_date"))
        return cls(**_tax_values(payload, partial=False))


@dataclass(frozen=True)
class UpdateTaxRequest:
    tax_type: str | None = None
    period_year: int | None = None
    period_month: int | None = None
    period_quarter: int | None = None
    taxable_amount_cents: int | None = None
    tax_rate_bps: int | None = None
    due_date: datetime | None = None
    payment_date: datetime | None = None
    status: str | None = None
    payment_reference: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    recorded_by: str | None = None
    provided: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_payload(cls, payload: Any) -> "UpdateTaxRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, TAX_FIELDS)
        values = _tax_values(payload, partial=True)
        return cls(provided=frozenset(values), **values)

    def changes(self) -> dict[str, Any]:
        return _changes(self, self.provided)


@dataclass(frozen=True)
class MarkTaxPaidRequest:
    payment_date: datetime | None = None
    payment_reference: str | None = None
    payment_method: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "MarkTaxPaidRequest":
        payload = ensure_payload(payload)
        reject_unknown_fields(payload, {"payment_date", "payment_reference", "payment_method"})
        return cls(
            payment_date=coerce_datetime("payment_date", payload.get("payment_date")),
            payment_reference=coerce_str("payment_reference", payload.get("payment_reference"), max_length=128),
            payment_method=coerce_choice("payment_method", payload.get("payment_method"), TAX_PAYMENT_METHODS),
        )
