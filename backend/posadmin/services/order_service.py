"""
Order intake: validate a cart, price it against current product prices and
persist the order with all of its items as one unit.

Prices are read once per request in a single batch query and captured into
each OrderItem.product_price. Later catalog price changes do not touch
stored orders.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterable, Mapping

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Order, OrderItem, Product
from ..money import line_total, to_money
from ..validation import OrderLineRequest, OrderRequest, ValidationError, validate_order_payload
from .auth_service import user_exists
from .concurrency import run_with_retry
from posadmin.time_utils import server_now


TRANSACTION_PREFIX = "TRX-"


class OrderError(Exception):
    """Raised when an order cannot be persisted."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class PricedLine:
    product_id: int
    quantity: int
    unit_price: Decimal
    total_item: Decimal


@dataclass(frozen=True)
class PricedOrder:
    lines: list[PricedLine]
    total: Decimal
    total_quantity: int


def generate_transaction_number() -> str:
    """TRX- followed by 16 uppercase hex chars (64 random bits)."""
    return f"{TRANSACTION_PREFIX}{secrets.token_hex(8).upper()}"


def existing_product_ids(product_ids: Iterable[int]) -> set[int]:
    ids = set(product_ids)
    if not ids:
        return set()
    rows = db.session.query(Product.id).filter(Product.id.in_(ids)).all()
    return {row.id for row in rows}


def price_lines(lines: Iterable[OrderLineRequest], prices: Mapping[int, Decimal]) -> PricedOrder:
    """
    Pure pricing fold: no datastore access.

    Raises KeyError if a line references a product missing from prices.
    """
    priced = []
    for line in lines:
        unit_price = to_money(prices[line.product_id])
        priced.append(PricedLine(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=unit_price,
            total_item=line_total(unit_price, line.quantity),
        ))

    total = to_money(sum((p.total_item for p in priced), Decimal("0")))
    total_quantity = sum(p.quantity for p in priced)
    return PricedOrder(lines=priced, total=total, total_quantity=total_quantity)


def _fetch_prices(product_ids: Iterable[int]) -> dict[int, Decimal]:
    ids = set(product_ids)
    rows = db.session.query(Product.id, Product.price).filter(Product.id.in_(ids)).all()
    return {row.id: row.price for row in rows}


def _transaction_number_taken(number: str) -> bool:
    # Soft-deleted orders keep their number reserved
    return db.session.query(Order.id).filter_by(transaction_number=number).first() is not None


def validate_order_request(payload) -> OrderRequest:
    return validate_order_payload(
        payload,
        user_exists=user_exists,
        existing_product_ids=existing_product_ids,
    )


def create_order(
    cashier_id,
    items,
    payment_method: str | None = None,
    *,
    number_factory: Callable[[], str] = generate_transaction_number,
) -> Order:
    """
    Create an order for cashier_id from [{product_id, quantity}, ...].

    Raises ValidationError (all field problems at once) or OrderError.
    """
    payload = {"cashier_id": cashier_id, "items": items, "payment_method": payment_method}
    return place_order(validate_order_request(payload), number_factory=number_factory)


def place_order(
    request: OrderRequest,
    *,
    number_factory: Callable[[], str] = generate_transaction_number,
) -> Order:
    """Persist an already validated OrderRequest."""
    if not request.items:
        raise ValidationError({"items": ["The items field is required."]})

    prices = _fetch_prices(line.product_id for line in request.items)

    # A product may have been removed since validation
    errors = {}
    for index, line in enumerate(request.items):
        if line.product_id not in prices:
            errors[f"items.{index}.product_id"] = [f"The selected items.{index}.product_id is invalid."]
    if errors:
        raise ValidationError(errors)

    priced = price_lines(request.items, prices)
    attempts = max(1, current_app.config["TRANSACTION_NUMBER_ATTEMPTS"])

    def _op() -> int:
        for attempt in range(attempts):
            number = number_factory()
            now = server_now()

            order = Order(
                cashier_id=request.cashier_id,
                transaction_number=number,
                total=priced.total,
                total_quantity=priced.total_quantity,
                payment_method=request.payment_method,
                created_at=now,
                updated_at=now,
            )
            for line in priced.lines:
                order.order_items.append(OrderItem(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    product_price=line.unit_price,
                    total_item=line.total_item,
                    created_at=now,
                    updated_at=now,
                ))

            db.session.add(order)
            try:
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                if _transaction_number_taken(number):
                    current_app.logger.warning(
                        "Transaction number collision on %s (attempt %d/%d)", number, attempt + 1, attempts
                    )
                    continue
                raise
            except Exception:
                db.session.rollback()
                raise
            return order.id

        raise OrderError(
            "Could not allocate a unique transaction number",
            details={"attempts": attempts},
        )

    order_id = run_with_retry(_op)
    order = get_order(order_id)
    current_app.logger.info(
        "Order %s created: %d items, quantity %d, total %s",
        order.transaction_number, len(order.order_items), order.total_quantity, order.total,
    )
    return order


def _orders_query():
    return db.session.query(Order).options(
        selectinload(Order.order_items).selectinload(OrderItem.product)
    ).filter(Order.deleted_at.is_(None))


def get_order(order_id: int) -> Order | None:
    return _orders_query().filter(Order.id == order_id).first()


def list_orders() -> list[Order]:
    """All live (not soft-deleted) orders with items and products loaded."""
    return _orders_query().order_by(Order.id.asc()).all()


def soft_delete_order(order_id: int) -> Order:
    """Mark an order deleted. Items are kept; reads stop returning it."""
    order = db.session.get(Order, order_id)
    if not order or order.deleted_at is not None:
        raise OrderError("Order not found")
    order.deleted_at = server_now()
    db.session.commit()
    return order
