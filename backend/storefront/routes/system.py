# backend/storefront/routes/system.py
"""
System health endpoint.

Reports whether the database answers and whether the status catalog the
order workflow depends on is seeded.
"""

import time
from datetime import datetime, timezone

from flask import Blueprint, current_app
from sqlalchemy import text

from ..errors import NotFoundError
from ..extensions import db
from ..services.status_catalog import status_catalog
from ..services.unit_of_work import with_transaction

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }
    finally:
        db.session.rollback()


def check_status_catalog_health() -> dict:
    """Degraded when a core status is missing from the reference table."""
    start_time = time.time()
    try:
        resolved = with_transaction(lambda u: status_catalog.load(u), write=False)
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"statuses": len(resolved)},
        }
    except NotFoundError as e:
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "degraded",
            "latency_ms": round(elapsed_ms, 2),
            "warning": e.message,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Status catalog health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Status catalog error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded (catalog not seeded)
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    catalog_health = check_status_catalog_health()

    all_checks = [database_health, catalog_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status, http_status = "unhealthy", 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    response = {
        "status": overall_status,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "status_catalog": catalog_health,
        },
    }

    return response, http_status
