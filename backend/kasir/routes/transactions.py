# Overview: Transaction history routes; filters and pages committed sales.

from flask import Blueprint, jsonify, request, g

from kasir.decorators import require_auth
from kasir.services import reporting_service


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")


@transactions_bp.get("")
@require_auth
def list_transactions():
    """
    Query params (dates are epoch milliseconds, both ends inclusive):
    - start_date, end_date
    - payment_method: cash | card | transfer
    - customer_name: exact match
    - limit (default 20, max 100), offset (default 0)
    """
    items = reporting_service.transactions_list(
        g.actor_id,
        start_ms=request.args.get("start_date", type=int),
        end_ms=request.args.get("end_date", type=int),
        payment_method=request.args.get("payment_method") or None,
        customer_name=request.args.get("customer_name") or None,
        limit=request.args.get("limit", type=int),
        offset=request.args.get("offset", type=int),
    )
    return jsonify({"items": items, "count": len(items)}), 200


@transactions_bp.get("/stats")
@require_auth
def transactions_stats():
    stats = reporting_service.transactions_stats(
        g.actor_id,
        start_ms=request.args.get("start_date", type=int),
        end_ms=request.args.get("end_date", type=int),
    )
    return jsonify(stats), 200
