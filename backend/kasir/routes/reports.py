from flask import Blueprint, jsonify, g

from kasir.decorators import require_auth
from kasir.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/today")
@require_auth
def today_report():
    return jsonify(reporting_service.today_stats(g.actor_id)), 200


@reports_bp.get("/monthly")
@require_auth
def monthly_report():
    return jsonify(reporting_service.monthly_stats(g.actor_id)), 200
