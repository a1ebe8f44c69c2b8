# backend/kontainar/routes/system.py
"""
System health endpoint.

Reports storage backend reachability and which collections are stored.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import StorageEntry
from ..services.registry import get_services
from ..storage import SqlStorage
from ..time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__)


def check_storage_health() -> dict:
    """
    Check the storage backend by listing its keys.

    Returns dict with status and details.
    """
    start_time = time.time()
    services = get_services()
    try:
        keys = list(services.storage.keys())
        details = {
            "backend": current_app.config["STORAGE_BACKEND"],
            "keys": len(keys),
            "collections": {
                name: service.store.key in keys for name, service in services.domains().items()
            },
        }
        if isinstance(services.storage, SqlStorage):
            details["rows"] = db.session.query(StorageEntry).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Storage health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Storage error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: storage reachable
    - 503: storage unreachable
    """
    storage_health = check_storage_health()
    http_status = 503 if storage_health["status"] == "unhealthy" else 200

    response = {
        "status": storage_health["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {
            "storage": storage_health,
        },
    }

    return response, http_status
