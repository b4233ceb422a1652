# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/kasir/routes/sales.py
"""Sales API routes"""

from flask import Blueprint, request, jsonify, g

from ..services import sales_service, reporting_service
from ..decorators import json_body, require_auth


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
def commit_sale_route():
    """
    Commit a cart as a sale.

    Body:
    - items: [{"product_id": int, "quantity": int}, ...]
    - payment_method: "cash" | "card" | "transfer"
    - customer_name: str (optional)

    Returns 201 {"sale_id": id}. 409 CONFLICT is safe to retry,
    422 INSUFFICIENT_STOCK is not.
    """
    data = json_body()

    sale_id = sales_service.commit_sale(
        g.actor_id,
        data.get("items"),
        data.get("payment_method"),
        data.get("customer_name"),
    )
    return jsonify({"sale_id": sale_id}), 201


@sales_bp.get("/recent")
@require_auth
def recent_sales_route():
    limit = request.args.get("limit", type=int)
    sales = reporting_service.recent_sales(g.actor_id, limit=limit)
    return jsonify({"items": sales, "count": len(sales)}), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
def get_sale_route(sale_id: int):
    """Sale with lines; the receipt summary."""
    sale = sales_service.get_sale(g.actor_id, sale_id)
    return jsonify({"sale": sale.to_dict(include_lines=True)}), 200
