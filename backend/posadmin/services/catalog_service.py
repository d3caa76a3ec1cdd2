# Overview: Service-layer operations for products and categories.

from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Category, Product
from ..money import to_money


class CatalogError(Exception):
    """Raised for catalog operation errors."""
    pass


def list_categories() -> list[Category]:
    return db.session.query(Category).order_by(Category.id.asc()).all()


def list_products() -> list[Product]:
    return db.session.query(Product).options(
        joinedload(Product.category)
    ).order_by(Product.id.asc()).all()


def create_category(name: str) -> Category:
    name = (name or "").strip()
    if not name:
        raise CatalogError("Category name is required")
    category = Category(name=name)
    db.session.add(category)
    db.session.commit()
    return category


def create_product(
    *,
    name: str,
    category_id: int,
    price,
    stock: int = 0,
    description: str | None = None,
    image: str | None = None,
) -> Product:
    name = (name or "").strip()
    if not name:
        raise CatalogError("Product name is required")
    if db.session.get(Category, category_id) is None:
        raise CatalogError("Category not found")

    amount = to_money(price)
    if amount < 0:
        raise CatalogError("Price must be >= 0")
    if stock < 0:
        raise CatalogError("Stock must be >= 0")

    product = Product(
        name=name,
        category_id=category_id,
        price=amount,
        stock=stock,
        description=description,
        image=image,
    )
    db.session.add(product)
    db.session.commit()
    return product


def update_price(product_id: int, price) -> Product:
    """Change the catalog price. Existing order items keep their snapshot."""
    product = db.session.get(Product, product_id)
    if not product:
        raise CatalogError("Product not found")
    amount = to_money(price)
    if amount < 0:
        raise CatalogError("Price must be >= 0")
    product.price = amount
    db.session.commit()
    return product
