# Overview: Flask API routes for the glass price master (admin only).

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_admin, require_auth
from ..services import price_master_service
from ..validation import ConflictError, NotFoundError, ValidationError


price_master_bp = Blueprint("price_master", __name__, url_prefix="/api/glass-price-master")


@price_master_bp.get("")
@require_auth
@require_admin
def list_entries_route():
    """?pending=true limits the list to entries still waiting for prices."""
    pending_only = request.args.get("pending", "").lower() in {"1", "true", "yes"}
    entries = price_master_service.list_entries(g.shop_id, pending_only=pending_only)
    return jsonify({"entries": [e.to_dict() for e in entries]}), 200


@price_master_bp.get("/<int:entry_id>")
@require_auth
@require_admin
def get_entry_route(entry_id: int):
    try:
        entry = price_master_service.get_entry(g.shop_id, entry_id)
        return jsonify(entry.to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@price_master_bp.get("/lookup/<glass_type>/<thickness>")
@require_auth
@require_admin
def lookup_route(glass_type: str, thickness: str):
    """Returns the entry, or null when the shop has none for that glass."""
    try:
        entry = price_master_service.lookup(g.shop_id, glass_type, thickness)
        return jsonify(entry.to_dict() if entry else None), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@price_master_bp.post("")
@require_auth
@require_admin
def create_entry_route():
    """
    Request body:
    {"glass_type": "CLEAR", "thickness": 5, "hsn_no": "7005",
     "purchase_price": 40, "selling_price": 55}

    Leaving out both prices creates a pending entry.
    """
    try:
        data = request.get_json(silent=True) or {}
        entry = price_master_service.create_entry(g.shop_id, data)
        return jsonify(entry.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create price entry")
        return jsonify({"error": "Internal server error"}), 500


@price_master_bp.put("/<int:entry_id>")
@require_auth
@require_admin
def update_entry_route(entry_id: int):
    try:
        data = request.get_json(silent=True) or {}
        entry = price_master_service.update_entry(g.shop_id, entry_id, data)
        return jsonify(entry.to_dict()), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update price entry")
        return jsonify({"error": "Internal server error"}), 500


@price_master_bp.delete("/<int:entry_id>")
@require_auth
@require_admin
def delete_entry_route(entry_id: int):
    try:
        deleted = price_master_service.delete_entry(g.shop_id, entry_id)
        return jsonify({"message": "Price entry deleted", "deleted_stock_rows": deleted}), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete price entry")
        return jsonify({"error": "Internal server error"}), 500
