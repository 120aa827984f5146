# Overview: Flask API routes for customers and their sites (admin only).

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_admin, require_auth
from ..services import customer_service
from ..validation import ConflictError, NotFoundError, ValidationError


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_admin
def list_customers_route():
    customers = customer_service.list_customers(g.shop_id)
    return jsonify({"customers": [c.to_dict() for c in customers]}), 200


@customers_bp.get("/search")
@require_auth
@require_admin
def search_customers_route():
    """?q= matches name, mobile or email."""
    customers = customer_service.search_customers(g.shop_id, request.args.get("q", ""))
    return jsonify({"customers": [c.to_dict() for c in customers]}), 200


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_admin
def get_customer_route(customer_id: int):
    try:
        customer = customer_service.get_customer(g.shop_id, customer_id)
        return jsonify(customer.to_dict()), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@customers_bp.post("")
@require_auth
@require_admin
def create_customer_route():
    try:
        data = request.get_json(silent=True) or {}
        customer = customer_service.create_customer(g.shop_id, data)
        return jsonify(customer.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.put("/<int:customer_id>")
@require_auth
@require_admin
def update_customer_route(customer_id: int):
    try:
        data = request.get_json(silent=True) or {}
        customer = customer_service.update_customer(g.shop_id, customer_id, data)
        return jsonify(customer.to_dict()), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<int:customer_id>")
@require_auth
@require_admin
def delete_customer_route(customer_id: int):
    try:
        customer_service.delete_customer(g.shop_id, customer_id)
        return "", 204

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<int:customer_id>/sites")
@require_auth
@require_admin
def list_sites_route(customer_id: int):
    try:
        sites = customer_service.list_sites(g.shop_id, customer_id)
        return jsonify({"sites": [s.to_dict() for s in sites]}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@customers_bp.post("/<int:customer_id>/sites")
@require_auth
@require_admin
def create_site_route(customer_id: int):
    try:
        data = request.get_json(silent=True) or {}
        site = customer_service.create_site(g.shop_id, customer_id, data)
        return jsonify(site.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create site")
        return jsonify({"error": "Internal server error"}), 500
