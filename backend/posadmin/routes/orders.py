# Overview: Flask API routes for order operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth
from ..services import order_service
from ..services.order_service import OrderError
from ..validation import ValidationError


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
def list_orders_route():
    """List live orders with their items and products."""
    orders = order_service.list_orders()
    return jsonify({"data": [order.to_dict() for order in orders]}), 200


@orders_bp.post("")
@require_auth
def create_order_route():
    """
    Create an order from {cashier_id, items: [{product_id, quantity}], payment_method?}.

    422 lists every invalid field at once, keyed by path (items.0.quantity).
    """
    try:
        payload = request.get_json(silent=True)
        order_request = order_service.validate_order_request(payload)
        order = order_service.place_order(order_request)

        return jsonify({
            "message": "Order created successfully",
            "data": order.to_dict(),
        }), 201

    except ValidationError as e:
        return jsonify({"message": e.summary(), "errors": e.errors}), 422
    except OrderError as e:
        current_app.logger.error("Order intake failed: %s %s", e, e.details)
        return jsonify({"message": "Internal server error"}), 500
    except Exception:
        current_app.logger.exception("Failed to create order")
        return jsonify({"message": "Internal server error"}), 500
