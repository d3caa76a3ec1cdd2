from __future__ import annotations

from ..extensions import db
from posadmin.money import money_str
from posadmin.time_utils import to_iso, server_now


class Order(db.Model):
    """
    Sales order header.

    Written once by order intake together with all of its items, never
    mutated afterwards. deleted_at marks a soft delete: the row stays
    (and keeps its transaction_number reserved) but reads skip it.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cashier_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Human-readable identifier (e.g., "TRX-9F2C01AB77E4D310")
    transaction_number = db.Column(db.String(64), nullable=False, unique=True)

    total = db.Column(db.Numeric(12, 2), nullable=False)
    total_quantity = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(32), nullable=False, default="cash")  # cash, credit_card, etc.

    created_at = db.Column(db.DateTime, nullable=False, default=server_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=server_now, onupdate=server_now)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    cashier = db.relationship("User", backref=db.backref("orders", lazy=True, passive_deletes=True))
    order_items = db.relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.id",
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} transaction_number={self.transaction_number!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_number": self.transaction_number,
            "cashier_id": self.cashier_id,
            "total": money_str(self.total),
            "total_quantity": self.total_quantity,
            "payment_method": self.payment_method,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
            "order_items": [item.to_dict() for item in self.order_items],
        }


class OrderItem(db.Model):
    """One product line on an order, priced at order time."""
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
        db.Index("ix_order_items_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(
        db.Integer,
        db.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    # Snapshot of Product.price when the order was placed
    product_price = db.Column(db.Numeric(12, 2), nullable=False)
    # quantity * product_price
    total_item = db.Column(db.Numeric(12, 2), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=server_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=server_now, onupdate=server_now)

    order = db.relationship("Order", back_populates="order_items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "product_price": money_str(self.product_price),
            "total_item": money_str(self.total_item),
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
            "product": self.product.to_summary_dict() if self.product else None,
        }
