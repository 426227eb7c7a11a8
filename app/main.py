from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Callable
import time

from app.core.config import Settings, settings
from app.core.database import FirestoreClient
from app.api.v1 import migrations
from app.middleware.logging import LoggingMiddleware
from app.schemas.responses import HealthCheckResponse, ServiceInfoResponse
from app.utils.logger import get_logger

logger = get_logger(__name__)

MIGRATE_PATHS = ["/migrateRegistrations", "/api/v1/migrations/registrations"]


def create_app(store_factory: Callable[[Settings], FirestoreClient] = FirestoreClient) -> FastAPI:
    """Build the API; the store handle is opened and closed by the lifespan"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info(f"Starting up {settings.app_name}...")
        logger.info(f"Debug mode: {settings.debug}")
        store = store_factory(settings)
        store.open()
        app.state.firestore = store

        yield

        logger.info(f"Shutting down {settings.app_name}...")
        store.close()

    app = FastAPI(
        title="Registration Migration API",
        description="Moves user registrations into per-event registration collections",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Health Check"},
            {"name": "Migrations"},
        ],
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.middleware("http")(LoggingMiddleware())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "timestamp": time.time()
            }
        )

    @app.get("/health", tags=["Health Check"], response_model=HealthCheckResponse)
    async def health_check(request: Request):
        """System health check endpoint"""
        store = getattr(request.app.state, "firestore", None)
        firestore_status = "connected" if store is not None and store.is_open else "disconnected"
        return HealthCheckResponse(
            status="healthy" if firestore_status == "connected" else "unhealthy",
            timestamp=time.time(),
            service=settings.app_name,
            version=settings.app_version,
            dependencies={"firestore": firestore_status},
        )

    @app.get("/", tags=["Health Check"], response_model=ServiceInfoResponse)
    async def root():
        """Root endpoint with API information"""
        return ServiceInfoResponse(
            message=settings.app_name,
            version=settings.app_version,
            status="running",
            docs="/docs",
            health="/health",
            endpoints=MIGRATE_PATHS,
        )

    app.include_router(migrations.router, prefix="/api/v1")
    # Path of the original cloud function trigger
    app.add_api_route(
        "/migrateRegistrations",
        migrations.migrate_registrations,
        methods=["GET", "POST"],
        tags=["Migrations"],
        summary="Migrate Registrations",
    )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        limit_concurrency=settings.max_instances,
    )
