"""
Health Check API Routes

Liveness with a database ping, and the Prometheus scrape endpoint.
"""

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from line_balancing.core.observability import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/health", summary="Overall system health")
def get_health_status(request: Request) -> JSONResponse:
    try:
        with Session(request.app.state.engine) as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("health_check_failed", error=str(e))
        return JSONResponse(
            content={"status": "unhealthy", "database": "unreachable"},
            status_code=503,
        )
    return JSONResponse(content={"status": "healthy", "database": "ok"})


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
def get_metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
