from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from posadmin.time_utils import parse_strict_date


class ValidationError(ValueError):
    """
    422-level input problem.

    errors maps a field path ("cashier_id", "items.0.product_id") to every
    message raised against it, so a single response reports all of them.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = {k: list(v) for k, v in errors.items()}
        super().__init__(self.summary())

    def summary(self) -> str:
        messages = [msg for msgs in self.errors.values() for msg in msgs]
        if not messages:
            return "The given data was invalid."
        extra = len(messages) - 1
        if extra <= 0:
            return messages[0]
        noun = "error" if extra == 1 else "errors"
        return f"{messages[0]} (and {extra} more {noun})"


class ErrorBag:
    """Collects field errors; raise_if_any() turns them into a ValidationError."""

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def add(self, path: str, message: str) -> None:
        self._errors.setdefault(path, []).append(message)

    def raise_if_any(self) -> None:
        if self._errors:
            raise ValidationError(self._errors)


def _label(path: str) -> str:
    return path.replace("_", " ")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def coerce_int(value: Any) -> int:
    """
    Strict integer coercion for JSON input.

    Accepts ints (not bools) and plain digit strings. Rejects floats,
    scientific notation and decimals.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValueError("blank")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise ValueError("scientific notation not allowed")
        # Reject decimal points (e.g., "12.5")
        if "." in stripped:
            raise ValueError("decimals not allowed")
        return int(stripped)
    raise ValueError("not an integer")


# =============================================================================
# Orders
# =============================================================================


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class OrderRequest:
    cashier_id: int
    items: list[OrderLineRequest] = field(default_factory=list)
    payment_method: str = "cash"


DEFAULT_PAYMENT_METHOD = "cash"
MAX_PAYMENT_METHOD_LENGTH = 32

# Signed 64-bit INTEGER bound for primary keys
MAX_DB_INT = 2**63 - 1
# Signed 32-bit, so summed quantities stay inside MAX_DB_INT
MAX_QUANTITY = 2**31 - 1


def _in_id_range(value: int) -> bool:
    return 1 <= value <= MAX_DB_INT


def validate_order_payload(payload: Any, *, user_exists, existing_product_ids) -> OrderRequest:
    """
    Validates a POST /orders body and returns a normalized OrderRequest.

    user_exists(id) -> bool and existing_product_ids(ids) -> set[int] are
    the referential lookups. The product lookup is called once with every
    syntactically valid id.

    Every problem is collected before raising.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError({"payload": ["Invalid JSON payload."]})

    errors = ErrorBag()

    # cashier_id
    cashier_id = None
    raw_cashier = payload.get("cashier_id")
    if _is_blank(raw_cashier):
        errors.add("cashier_id", "The cashier id field is required.")
    else:
        try:
            cashier_id = coerce_int(raw_cashier)
        except ValueError:
            errors.add("cashier_id", "The cashier id field must be an integer.")
        else:
            if not _in_id_range(cashier_id) or not user_exists(cashier_id):
                errors.add("cashier_id", "The selected cashier id is invalid.")
                cashier_id = None

    # items
    raw_items = payload.get("items")
    parsed: list[tuple[int, int | None, int | None]] = []
    if raw_items is None or (isinstance(raw_items, (list, str)) and len(raw_items) == 0):
        errors.add("items", "The items field is required.")
    elif not isinstance(raw_items, list):
        errors.add("items", "The items field must be an array.")
    else:
        for index, raw in enumerate(raw_items):
            parsed.append(_parse_line(index, raw, errors))

    # product existence, one batch lookup
    candidate_ids = {pid for _, pid, _ in parsed if pid is not None}
    known_ids = set(existing_product_ids(candidate_ids)) if candidate_ids else set()
    for index, product_id, _ in parsed:
        if product_id is not None and product_id not in known_ids:
            errors.add(f"items.{index}.product_id", f"The selected items.{index}.product_id is invalid.")

    # payment_method
    payment_method = payload.get("payment_method")
    if _is_blank(payment_method):
        payment_method = DEFAULT_PAYMENT_METHOD
    elif not isinstance(payment_method, str):
        errors.add("payment_method", "The payment method field must be a string.")
    else:
        payment_method = payment_method.strip()
        if len(payment_method) > MAX_PAYMENT_METHOD_LENGTH:
            errors.add(
                "payment_method",
                f"The payment method field must not be greater than {MAX_PAYMENT_METHOD_LENGTH} characters.",
            )

    errors.raise_if_any()

    return OrderRequest(
        cashier_id=cashier_id,
        items=[OrderLineRequest(product_id=pid, quantity=qty) for _, pid, qty in parsed],
        payment_method=payment_method,
    )


def _parse_line(index: int, raw: Any, errors: ErrorBag) -> tuple[int, int | None, int | None]:
    prefix = f"items.{index}"
    if not isinstance(raw, dict):
        errors.add(prefix, f"The {prefix} field must be an object.")
        return index, None, None

    product_id = None
    raw_product = raw.get("product_id")
    if _is_blank(raw_product):
        errors.add(f"{prefix}.product_id", f"The {prefix}.product_id field is required.")
    else:
        try:
            product_id = coerce_int(raw_product)
        except ValueError:
            errors.add(f"{prefix}.product_id", f"The selected {prefix}.product_id is invalid.")
        else:
            if not _in_id_range(product_id):
                errors.add(f"{prefix}.product_id", f"The selected {prefix}.product_id is invalid.")
                product_id = None

    quantity = None
    raw_quantity = raw.get("quantity")
    if _is_blank(raw_quantity):
        errors.add(f"{prefix}.quantity", f"The {prefix}.quantity field is required.")
    else:
        try:
            quantity = coerce_int(raw_quantity)
        except ValueError:
            errors.add(f"{prefix}.quantity", f"The {prefix}.quantity field must be an integer.")
        else:
            if quantity < 1:
                errors.add(f"{prefix}.quantity", f"The {prefix}.quantity field must be at least 1.")
                quantity = None
            elif quantity > MAX_QUANTITY:
                errors.add(
                    f"{prefix}.quantity",
                    f"The {prefix}.quantity field must not be greater than {MAX_QUANTITY}.",
                )
                quantity = None

    return index, product_id, quantity


# =============================================================================
# Reports
# =============================================================================


def validate_report_range(args) -> tuple[date, date]:
    """
    Validates start_date / end_date query parameters (YYYY-MM-DD, end >= start).

    A malformed date and an inverted range are both reported on the
    offending field.
    """
    errors = ErrorBag()
    parsed: dict[str, date | None] = {}

    for key in ("start_date", "end_date"):
        raw = args.get(key)
        parsed[key] = None
        if _is_blank(raw):
            errors.add(key, f"The {_label(key)} field is required.")
            continue
        try:
            parsed[key] = parse_strict_date(raw)
        except (TypeError, ValueError):
            errors.add(key, f"The {_label(key)} field must match the format Y-m-d.")

    start, end = parsed["start_date"], parsed["end_date"]
    if start is not None and end is not None and end < start:
        errors.add("end_date", "The end date field must be a date after or equal to start date.")

    errors.raise_if_any()
    return start, end
