# Overview: Request authentication and role decorators for API routes.

from functools import wraps

from flask import current_app, g, jsonify, request

from .services.auth_service import get_user_by_username, normalize_role
from .services.token_service import AuthError, get_token_service


def _is_authenticated() -> bool:
    return hasattr(g, "current_user") and hasattr(g, "shop_id")


def require_auth(f):
    """
    Require a valid bearer token and establish tenant context.

    Sets the following Flask g attributes:
    - g.current_user: the authenticated User
    - g.username: token subject
    - g.role: normalized role from the token (ADMIN / STAFF)
    - g.shop_id: the user's shop (tenant context)

    Returns 401 when the header is missing, the token is malformed, forged
    or expired, or the user no longer exists. CORS preflight (OPTIONS)
    passes through untouched.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if request.method == "OPTIONS":
            return current_app.make_default_options_response()

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()
        try:
            claims = get_token_service().verify(token)
        except AuthError as e:
            return jsonify({"error": str(e)}), 401

        user = get_user_by_username(claims.username)
        if not user:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = user
        g.username = user.username
        g.role = normalize_role(claims.role)
        g.shop_id = user.shop_id

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Allow only the given roles. Accepts 'ADMIN' or 'ROLE_ADMIN' spellings;
    must be stacked under @require_auth.
    """
    allowed = {normalize_role(r) for r in roles}

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if request.method == "OPTIONS":
                return current_app.make_default_options_response()
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401
            if g.role not in allowed:
                return jsonify({
                    "error": "Access denied",
                    "required_roles": sorted(allowed),
                }), 403
            return f(*args, **kwargs)

        return decorated_function
    return decorator


require_admin = require_role("ADMIN")
require_staff = require_role("STAFF", "ADMIN")
