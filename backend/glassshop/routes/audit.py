# Overview: Flask API routes for the stock audit trail.

from flask import Blueprint, g, jsonify

from ..decorators import require_admin, require_auth, require_staff
from ..services import audit_service


audit_bp = Blueprint("audit", __name__, url_prefix="/audit")


@audit_bp.get("/recent")
@require_auth
@require_admin
def recent_audit_route():
    """Last 100 stock movements of the shop, newest first."""
    entries = audit_service.recent_entries(g.shop_id)
    return jsonify({"entries": [e.to_dict() for e in entries]}), 200


@audit_bp.get("/transfer-count")
@require_auth
@require_staff
def transfer_count_route():
    return jsonify({"count": audit_service.transfer_count(g.shop_id)}), 200
