"""
Patient Management API
Controller/Service/Repository Pattern
"""

import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import ApplicationConfig, get_config
from .core.database import DatabaseManager
from .core.logging import setup_logging
from .core.metrics import observe_requests
from .core.responses import error_response
from .domains.patient.controllers.patient_controller import router as patient_router


logger = logging.getLogger(__name__)


# FastAPI application with lifecycle management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the connection pool on startup and close it exactly once"""
    config: ApplicationConfig = app.state.config

    logger.info(f"Starting {config.app_name} ({config.environment})...")
    db_manager = DatabaseManager(config.database)
    app.state.db_manager = db_manager

    try:
        await db_manager.initialize()
        logger.info(f"{config.app_name} started successfully")
        yield
    finally:
        logger.info(f"Shutting down {config.app_name}...")
        await db_manager.cleanup()
        logger.info("Shutdown complete")


def _format_validation_errors(exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return messages


def register_exception_handlers(app: FastAPI) -> None:
    """Translate framework and unexpected errors into the response envelope"""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            requested = request.url.path + (f"?{request.url.query}" if request.url.query else "")
            return error_response(404, "Route not found", requestedUrl=requested)
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(400, "Validation failed", errors=_format_validation_errors(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        extra = {}
        if not app.state.config.is_production:
            extra["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return error_response(500, str(exc) or "Internal server error", **extra)


def create_app(config: Optional[ApplicationConfig] = None) -> FastAPI:
    """Build the application; tests pass their own configuration"""
    config = config or get_config()

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        description="Patient record management API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.config = config

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_origins,
        allow_credentials=config.security.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(observe_requests)

    register_exception_handlers(app)

    # Include domain routers
    app.include_router(patient_router)

    # Root endpoint
    @app.get("/")
    async def root():
        """Liveness and service information"""
        return {
            "success": True,
            "message": "Patient Management API is running",
            "version": config.app_version,
            "endpoints": {
                "patients": "/api/patients",
                "health": "/health",
                "metrics": "/metrics",
                "documentation": "/docs"
            }
        }

    # Health check endpoint
    @app.get("/health")
    async def health_check(request: Request):
        """Service and database health"""
        database = await request.app.state.db_manager.health_check()
        return {
            "status": "healthy" if database["status"] == "healthy" else "degraded",
            "version": config.app_version,
            "environment": config.environment,
            "database": database,
            "timestamp": datetime.now(timezone.utc)
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint"""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn"""
    import uvicorn

    config = get_config()
    setup_logging(config.logging)
    logger.info(f"Configuration: {config.to_dict()}")

    try:
        uvicorn.run(
            app,
            host=config.host,
            port=config.port,
            loop="uvloop",
            log_level=config.logging.level.lower(),
            access_log=False
        )
    except Exception:
        logger.critical("Server terminated with a fatal error", exc_info=True)
        raise


if __name__ == "__main__":
    run()
