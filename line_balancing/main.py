import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.engine import Engine
from sqlmodel import Session
from starlette.middleware.base import BaseHTTPMiddleware

from line_balancing.api.main import api_router
from line_balancing.application.services.balancing_service import (
    BalancingApplicationService,
)
from line_balancing.core.config import get_settings
from line_balancing.core.db import get_engine, init_db
from line_balancing.core.observability import get_logger, setup_structured_logging
from line_balancing.domain.shared.exceptions import DomainError, ErrorType
from line_balancing.infrastructure.database.repositories.balancing_repository import (
    SqlBalancingSessionGateway,
)
from line_balancing.infrastructure.database.repositories.operation_catalog_repository import (
    SqlOperationCatalog,
)
from line_balancing.infrastructure.database.unit_of_work import UnitOfWorkManager
from line_balancing.infrastructure.events import register_event_handlers

logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    ErrorType.VALIDATION: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.BUSINESS_RULE: 409,
    ErrorType.CONSTRAINT_VIOLATION: 422,
    ErrorType.REPOSITORY: 503,
}


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Logs every request with a correlation id."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        start_time = time.time()

        response = await call_next(request)

        response.headers["X-Correlation-ID"] = correlation_id
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_seconds=time.time() - start_time,
            correlation_id=correlation_id,
        )
        return response


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = ERROR_STATUS_CODES.get(exc.error_type, 400)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, **exc.to_dict())
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


def build_service(engine: Engine) -> BalancingApplicationService:
    uow_manager = UnitOfWorkManager(lambda: Session(engine))
    return BalancingApplicationService(
        catalog=SqlOperationCatalog(uow_manager),
        gateway=SqlBalancingSessionGateway(uow_manager),
    )


def create_app(
    service: BalancingApplicationService | None = None,
    engine: Engine | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        service: Prebuilt application service, wired to the database if omitted
        engine: Database engine, the configured one if omitted
    """
    settings = get_settings()
    engine = engine or get_engine()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_structured_logging()
        init_db(engine)
        register_event_handlers()
        logger.info(
            "application_started",
            project_name=settings.PROJECT_NAME,
            environment=settings.ENVIRONMENT,
            api_version=settings.API_V1_STR,
            metrics_enabled=settings.ENABLE_METRICS,
        )
        yield
        logger.info("application_stopped")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Production-line balancing: split a product's operations "
        "among operators and track throughput, takt time and occupancy.",
        version="1.0.0",
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.balancing_service = service or build_service(engine)

    app.add_middleware(ObservabilityMiddleware)
    app.add_exception_handler(DomainError, domain_error_handler)
    app.include_router(api_router, prefix=settings.API_V1_STR)
    return app
