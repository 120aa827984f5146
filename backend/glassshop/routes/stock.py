# Overview: Flask API routes for stand stock; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_staff
from ..services import stock_service
from ..services.stock_service import InsufficientStockError
from ..validation import NotFoundError, ValidationError


stock_bp = Blueprint("stock", __name__, url_prefix="/stock")


def _movement_args(data: dict) -> dict:
    return {
        "glass_type": data.get("glass_type"),
        "thickness": data.get("thickness"),
        "quantity": data.get("quantity"),
        "height": data.get("height"),
        "width": data.get("width"),
        "unit": data.get("unit"),
    }


@stock_bp.get("/all")
@require_auth
@require_staff
def list_stock_route():
    rows = stock_service.list_stock(g.shop_id)
    return jsonify({"stock": [r.to_dict() for r in rows]}), 200


@stock_bp.get("/recent")
@require_auth
@require_staff
def recent_stock_route():
    rows = stock_service.recent_stock(g.shop_id)
    return jsonify({"stock": [r.to_dict() for r in rows]}), 200


@stock_bp.get("/alert/low")
@require_auth
@require_staff
def low_stock_route():
    rows = stock_service.low_stock(g.shop_id)
    return jsonify({"stock": [r.to_dict() for r in rows]}), 200


@stock_bp.post("/update")
@require_auth
@require_staff
def update_stock_route():
    """
    Add or remove glass on a stand.

    Request body:
    {
        "glass_type": "CLEAR", "thickness": 5, "stand_no": 3,
        "quantity": 10, "action": "ADD" | "REMOVE",
        "height": "24", "width": "36", "unit": "MM"
    }

    Returns:
        200: {"message", "stock"}
        400: invalid input (no stock changes)
    """
    try:
        data = request.get_json(silent=True) or {}
        action = str(data.get("action") or "").strip().upper()
        stock = stock_service.update_stock(
            shop_id=g.shop_id,
            actor=g.current_user,
            stand_no=data.get("stand_no"),
            action=action,
            **_movement_args(data),
        )
        verb = "added" if action == stock_service.ACTION_ADD else "removed"
        return jsonify({"message": f"Stock {verb} successfully", "stock": stock.to_dict()}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to update stock")
        return jsonify({"error": "Internal server error"}), 500


@stock_bp.post("/transfer")
@require_auth
@require_staff
def transfer_stock_route():
    """
    Move glass between two stands of the caller's shop.

    Request body: movement fields plus "from_stand" and "to_stand".

    Returns:
        200: {"message", "from", "to"}
        400: invalid input or insufficient stock on the source stand
        404: glass type not in the catalog
    """
    try:
        data = request.get_json(silent=True) or {}
        source, dest = stock_service.transfer_stock(
            shop_id=g.shop_id,
            actor=g.current_user,
            from_stand=data.get("from_stand"),
            to_stand=data.get("to_stand"),
            **_movement_args(data),
        )
        return jsonify({
            "message": "Stock transferred successfully",
            "from": source.to_dict(),
            "to": dest.to_dict(),
        }), 200

    except (ValidationError, InsufficientStockError) as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to transfer stock")
        return jsonify({"error": "Internal server error"}), 500
