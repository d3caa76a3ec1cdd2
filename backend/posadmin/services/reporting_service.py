# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

from __future__ import annotations

from datetime import date

from sqlalchemy import func

from posadmin.extensions import db
from posadmin.models import Order, OrderItem, Product
from posadmin.money import to_money
from posadmin.time_utils import day_window
from posadmin.validation import ValidationError


def _window(start_date: date, end_date: date):
    if end_date < start_date:
        raise ValidationError({
            "end_date": ["The end date field must be a date after or equal to start date."]
        })
    return day_window(start_date, end_date)


def summary(start_date: date, end_date: date) -> dict:
    """
    Revenue and units sold for orders created inside the window.

    Items count when their order's created_at is in range, whatever their
    own timestamp says.
    """
    start_dt, end_dt = _window(start_date, end_date)

    order_in_window = (
        Order.deleted_at.is_(None),
        Order.created_at.between(start_dt, end_dt),
    )

    revenue = db.session.query(
        func.coalesce(func.sum(Order.total), 0)
    ).filter(*order_in_window).scalar()

    sold_quantity = db.session.query(
        func.coalesce(func.sum(OrderItem.quantity), 0)
    ).join(Order, OrderItem.order_id == Order.id).filter(*order_in_window).scalar()

    return {
        "total_revenue": to_money(revenue),
        "total_sold_quantity": int(sold_quantity or 0),
    }


def product_sales(start_date: date, end_date: date) -> list[dict]:
    """
    Units and revenue per product for order items created inside the window.

    This filters on OrderItem.created_at, not the order's timestamp.
    Ordered by quantity sold (desc), then product id.
    """
    start_dt, end_dt = _window(start_date, end_date)

    total_quantity = func.sum(OrderItem.quantity).label("total_quantity")
    total_item = func.sum(OrderItem.total_item).label("total_item")

    rows = db.session.query(
        Product.id.label("product_id"),
        Product.name.label("product_name"),
        Product.price.label("product_price"),
        total_quantity,
        total_item,
    ).select_from(OrderItem).join(
        Product, OrderItem.product_id == Product.id
    ).join(
        Order, OrderItem.order_id == Order.id
    ).filter(
        Order.deleted_at.is_(None),
        OrderItem.created_at.between(start_dt, end_dt),
    ).group_by(
        Product.id, Product.name, Product.price
    ).order_by(
        total_quantity.desc(), Product.id.asc()
    ).all()

    return [
        {
            "product_id": row.product_id,
            "product_name": row.product_name,
            "product_price": to_money(row.product_price),
            "total_quantity": int(row.total_quantity or 0),
            "total_item": to_money(row.total_item),
        }
        for row in rows
    ]
