# backend/glassshop/routes/system.py
"""
System health endpoint.

Reports database reachability and whether the token issuer is configured,
for load balancers and deployment debugging.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..models import Shop
from ..services.token_service import EXTENSION_KEY
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        shop_count = db.session.query(Shop).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"shops": shop_count},
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_token_service_health() -> dict:
    if EXTENSION_KEY not in current_app.extensions:
        return {"status": "unhealthy", "error": "Token service not configured"}
    return {
        "status": "healthy",
        "details": {"expiration_hours": current_app.config.get("JWT_EXPIRATION_HOURS")},
    }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: all checks healthy
    - 503: one or more checks unhealthy
    """
    start_time = time.time()
    checks = {
        "database": check_database_health(),
        "token_service": check_token_service_health(),
    }
    unhealthy = any(c["status"] == "unhealthy" for c in checks.values())

    response = {
        "status": "unhealthy" if unhealthy else "healthy",
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": checks,
    }
    return response, 503 if unhealthy else 200
