from flask import Blueprint, jsonify, request, current_app

from posadmin.decorators import require_auth
from posadmin.money import money_str
from posadmin.services import reporting_service
from posadmin.validation import ValidationError, validate_report_range


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _error(exc: ValidationError):
    return jsonify({"status": "error", "message": exc.errors}), 422


@reports_bp.get("/summary")
@require_auth
def summary_report():
    try:
        start_date, end_date = validate_report_range(request.args)
        report = reporting_service.summary(start_date, end_date)
        return jsonify({
            "status": "success",
            "data": {
                "total_revenue": money_str(report["total_revenue"]),
                "total_sold_quantity": report["total_sold_quantity"],
            },
        }), 200
    except ValidationError as exc:
        return _error(exc)
    except Exception:
        current_app.logger.exception("Failed to build summary report")
        return jsonify({"status": "error", "message": "Internal server error"}), 500


@reports_bp.get("/product-sales")
@require_auth
def product_sales_report():
    try:
        start_date, end_date = validate_report_range(request.args)
        rows = reporting_service.product_sales(start_date, end_date)
        return jsonify({
            "status": "success",
            "data": [
                {
                    **row,
                    "product_price": money_str(row["product_price"]),
                    "total_item": money_str(row["total_item"]),
                }
                for row in rows
            ],
        }), 200
    except ValidationError as exc:
        return _error(exc)
    except Exception:
        current_app.logger.exception("Failed to build product sales report")
        return jsonify({"status": "error", "message": "Internal server error"}), 500
