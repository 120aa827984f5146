# Overview: Flask API routes for shop registration, login and staff accounts.

# backend/glassshop/routes/auth.py
"""
Authentication API routes

- POST /auth/register-shop   public; creates shop + first admin
- POST /auth/login           public; returns a bearer token
- GET  /auth/profile         any signed-in user
- POST /auth/change-password any signed-in user
- POST /auth/create-staff    admin
- GET  /auth/staff           admin
- DELETE /auth/staff/<id>    admin; only staff of the admin's own shop
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_admin, require_auth
from ..services import auth_service
from ..services.auth_service import PasswordValidationError, StaffAccessError
from ..services.token_service import get_token_service
from ..validation import ConflictError, NotFoundError, ValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/register-shop")
def register_shop_route():
    """
    Request body:
    {
        "username": "owner", "password": "secret", "shop_name": "Sharma Glass",
        "email": "...", "owner_name": "...", "whatsapp_number": "...",
        "address": "...", "gstin": "...", "state": "Maharashtra"
    }

    Returns:
        201: shop and admin created
        400: missing fields / weak password
        409: username taken
    """
    try:
        data = request.get_json(silent=True) or {}
        shop, user = auth_service.register_shop(
            username=data.get("username"),
            password=data.get("password"),
            shop_name=data.get("shop_name"),
            email=data.get("email"),
            owner_name=data.get("owner_name"),
            whatsapp_number=data.get("whatsapp_number"),
            address=data.get("address"),
            gstin=data.get("gstin"),
            state=data.get("state"),
        )
        return jsonify({
            "message": "Shop registered successfully",
            "shop": shop.to_dict(),
            "user": user.to_dict(),
        }), 201

    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register shop")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """Exchange username/password for a bearer token."""
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        user = auth_service.authenticate(username, password)
        if not user:
            return jsonify({"error": "Invalid username or password"}), 401

        token = get_token_service().issue(user.username, user.role)
        return jsonify({
            "token": token,
            "role": user.role,
            "username": user.username,
            "shop_id": user.shop_id,
        }), 200

    except Exception:
        current_app.logger.exception("Failed to log in")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/profile")
@require_auth
def profile_route():
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "shop": user.shop.to_dict() if user.shop else None,
    }), 200


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    try:
        data = request.get_json(silent=True) or {}
        auth_service.change_password(
            user=g.current_user,
            current_password=data.get("current_password"),
            new_password=data.get("new_password"),
        )
        return jsonify({"message": "Password updated"}), 200

    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to change password")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/create-staff")
@require_auth
@require_admin
def create_staff_route():
    try:
        data = request.get_json(silent=True) or {}
        user = auth_service.create_staff(
            admin=g.current_user,
            username=data.get("username"),
            password=data.get("password"),
        )
        return jsonify({"message": "Staff created", "user": user.to_dict()}), 201

    except (ValidationError, PasswordValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create staff")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/staff")
@require_auth
@require_admin
def list_staff_route():
    staff = auth_service.list_staff(g.shop_id)
    return jsonify({"staff": [u.to_dict() for u in staff]}), 200


@auth_bp.delete("/staff/<int:user_id>")
@require_auth
@require_admin
def delete_staff_route(user_id: int):
    try:
        auth_service.delete_staff(admin=g.current_user, user_id=user_id)
        return jsonify({"message": "Staff deleted"}), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except StaffAccessError as e:
        return jsonify({"error": str(e)}), 403
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to delete staff")
        return jsonify({"error": "Internal server error"}), 500
