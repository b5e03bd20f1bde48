"""
Health and metrics endpoints. No authentication required.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from vrcatalog.db.session import is_using_sqlite_fallback
from vrcatalog.dependencies import DbSession
from vrcatalog.models.asset import Asset
from vrcatalog.models.element import ContentElement
from vrcatalog.services.metrics import METRIC_PREFIX, get_metrics_collector

router = APIRouter()
logger = logging.getLogger(__name__)


async def _catalog_totals(db) -> dict[str, int]:
    """Asset and element counts, or -1 when the store cannot be queried."""
    try:
        asset_count = (await db.execute(select(func.count(Asset.id)))).scalar() or 0
        element_count = (await db.execute(select(func.count(ContentElement.id)))).scalar() or 0
        element_bytes = (await db.execute(select(func.sum(ContentElement.file_size)))).scalar() or 0
    except SQLAlchemyError as e:
        logger.warning(f"Catalog totals unavailable: {e}")
        return {"total_assets": -1, "total_elements": -1, "total_element_bytes": -1}

    return {
        "total_assets": asset_count,
        "total_elements": element_count,
        "total_element_bytes": element_bytes,
    }


@router.get("/health")
async def health_check(db: DbSession):
    """
    Service health check endpoint.

    Returns:
        {"status": "ok"} when service is healthy
        {"status": "degraded", "issues": [...]} when the database is unreachable
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return {"status": "degraded", "issues": [f"Database: {e}"]}

    response = {
        "status": "ok",
        "database": "sqlite (dev fallback)" if is_using_sqlite_fallback() else "postgresql",
    }
    if is_using_sqlite_fallback():
        response["warnings"] = ["Using SQLite dev fallback - PostgreSQL not configured"]

    return response


@router.get("/metrics")
async def metrics(db: DbSession):
    """Request counts, response times, error rates and catalog totals as JSON."""
    metrics_data = get_metrics_collector().get_metrics()
    metrics_data["catalog"] = await _catalog_totals(db)
    return metrics_data


@router.get("/metrics/prometheus", response_class=PlainTextResponse)
async def metrics_prometheus(db: DbSession):
    """Prometheus text exposition format endpoint."""
    text_output = get_metrics_collector().to_prometheus()

    totals = await _catalog_totals(db)
    p = METRIC_PREFIX
    text_output += f"# HELP {p}_assets_total Total number of assets\n"
    text_output += f"# TYPE {p}_assets_total gauge\n"
    text_output += f"{p}_assets_total {totals['total_assets']}\n\n"
    text_output += f"# HELP {p}_element_bytes_total Total element storage in bytes\n"
    text_output += f"# TYPE {p}_element_bytes_total gauge\n"
    text_output += f"{p}_element_bytes_total {totals['total_element_bytes']}\n"

    return PlainTextResponse(
        content=text_output,
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
