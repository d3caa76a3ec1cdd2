from __future__ import annotations

from ..extensions import db
from posadmin.money import money_str
from posadmin.time_utils import to_iso, server_now


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=server_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=server_now, onupdate=server_now)

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }


class Product(db.Model):
    """
    Product master data.

    Order intake only reads products. Price changes never reach existing
    order items, which carry their own product_price snapshot.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_name", "category_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)

    price = db.Column(db.Numeric(12, 2), nullable=False)
    # Tracked but not decremented by order intake
    stock = db.Column(db.Integer, nullable=False, default=0)

    description = db.Column(db.Text, nullable=True)
    image = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=server_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=server_now, onupdate=server_now)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} price={self.price}>"

    def to_summary_dict(self) -> dict:
        """Shape embedded in order items."""
        return {
            "id": self.id,
            "name": self.name,
            "price": money_str(self.price),
        }

    def to_dict(self, include_category: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "category_id": self.category_id,
            "price": money_str(self.price),
            "stock": self.stock,
            "description": self.description,
            "image": self.image,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }
        if include_category:
            data["category"] = self.category.to_dict() if self.category else None
        return data
