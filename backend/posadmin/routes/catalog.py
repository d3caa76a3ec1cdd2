# Overview: Flask API routes for read-only catalog listings.

from flask import Blueprint, jsonify

from ..decorators import require_auth
from ..services import catalog_service


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


@catalog_bp.get("/categories")
@require_auth
def list_categories_route():
    categories = catalog_service.list_categories()
    return jsonify({
        "message": "Categories retrieved successfully",
        "data": [category.to_dict() for category in categories],
    }), 200


@catalog_bp.get("/products")
@require_auth
def list_products_route():
    products = catalog_service.list_products()
    return jsonify({
        "message": "Products retrieved successfully",
        "data": [product.to_dict(include_category=True) for product in products],
    }), 200
