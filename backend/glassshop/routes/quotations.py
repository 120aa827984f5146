# Overview: Flask API routes for quotations (admin only); JSON plus PDF downloads.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_admin, require_auth
from ..responses import pdf_response
from ..services import pdf_service, quotation_service
from ..services.quotation_service import QuotationStateError
from ..validation import NotFoundError, ValidationError


quotations_bp = Blueprint("quotations", __name__, url_prefix="/api/quotations")


@quotations_bp.post("")
@require_auth
@require_admin
def create_quotation_route():
    """
    Request body:
    {
        "customer_id": 1,
        "billing_type": "GST" | "NON_GST",
        "gst_percentage": 18,
        "installation_charge": 0, "transport_charge": 0,
        "transportation_required": false,
        "discount": 0, "discount_type": "AMOUNT" | "PERCENTAGE", "discount_value": 0,
        "quotation_date": "2026-01-31", "valid_until": "2026-02-15",
        "items": [{
            "glass_type": "CLEAR", "thickness": "5", "height": 4, "width": 3,
            "height_unit": "FEET", "width_unit": "FEET", "quantity": 2,
            "rate_per_sqft": 50, "design": "PLAIN", "hsn_code": "7005",
            "polish": "CNC",
            "polish_sides": [{"side": "HEIGHT_1", "polish_type": "P", "rate": 15}]
        }]
    }

    Returns:
        201: quotation with items and computed totals
        400: invalid input
        404: customer not in this shop
    """
    try:
        data = request.get_json(silent=True) or {}
        quotation = quotation_service.create_quotation(g.shop_id, g.current_user, data)
        return jsonify(quotation.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create quotation")
        return jsonify({"error": "Internal server error"}), 500


@quotations_bp.get("")
@require_auth
@require_admin
def list_quotations_route():
    quotations = quotation_service.list_quotations(g.shop_id)
    return jsonify({"quotations": [q.to_dict(include_items=False) for q in quotations]}), 200


@quotations_bp.get("/status/<status>")
@require_auth
@require_admin
def list_quotations_by_status_route(status: str):
    try:
        quotations = quotation_service.list_quotations(g.shop_id, status=status)
        return jsonify({"quotations": [q.to_dict(include_items=False) for q in quotations]}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@quotations_bp.get("/<int:quotation_id>")
@require_auth
@require_admin
def get_quotation_route(quotation_id: int):
    try:
        quotation = quotation_service.get_quotation(g.shop_id, quotation_id)
        return jsonify(quotation.to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@quotations_bp.put("/<int:quotation_id>/confirm")
@require_auth
@require_admin
def confirm_quotation_route(quotation_id: int):
    """
    {"action": "CONFIRMED"} or {"confirmed": true} confirms; anything else
    rejects, optionally with "rejection_reason".
    """
    try:
        data = request.get_json(silent=True) or {}
        quotation = quotation_service.set_confirmation(g.shop_id, g.current_user, quotation_id, data)
        return jsonify(quotation.to_dict()), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except QuotationStateError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update quotation status")
        return jsonify({"error": "Internal server error"}), 500


@quotations_bp.delete("/<int:quotation_id>")
@require_auth
@require_admin
def delete_quotation_route(quotation_id: int):
    try:
        quotation_service.delete_quotation(g.shop_id, quotation_id)
        return "", 204

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except QuotationStateError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete quotation")
        return jsonify({"error": "Internal server error"}), 500


@quotations_bp.get("/<int:quotation_id>/download")
@require_auth
@require_admin
def download_quotation_route(quotation_id: int):
    try:
        filename, data = pdf_service.quotation_pdf(g.shop_id, quotation_id)
        return pdf_response(filename, data)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to render quotation PDF")
        return jsonify({"error": "Internal server error"}), 500


@quotations_bp.get("/<int:quotation_id>/print-cutting-pad")
@require_auth
@require_admin
def print_cutting_pad_route(quotation_id: int):
    try:
        filename, data = pdf_service.cutting_pad_pdf(g.shop_id, quotation_id)
        return pdf_response(filename, data, inline=True)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to render cutting pad PDF")
        return jsonify({"error": "Internal server error"}), 500
