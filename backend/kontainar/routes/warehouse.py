# Overview: Flask API route for warehouse-wide statistics.

# backend/kontainar/routes/warehouse.py
from flask import Blueprint

from ..services.registry import get_services

warehouse_bp = Blueprint("warehouse", __name__, url_prefix="/api/warehouse")


@warehouse_bp.get("/stats")
def warehouse_stats():
    """Inventory value, stock alerts, supplier counts and pending purchase totals."""
    return get_services().warehouse.stats()
