"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from schema_registry import __version__
from schema_registry.config import Settings
from schema_registry.errors import RegistryError, StorageUnavailable
from schema_registry.logging_conf import configure_logging
from schema_registry.routes.schemas import router as schemas_router
from schema_registry.services import RegistryService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around one Settings value."""
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the database pool and create tables on startup."""
        registry = RegistryService.from_settings(settings)
        if settings.CREATE_TABLES:
            await registry.database.create_all()
        app.state.registry = registry
        logger.info("Schema registry started")

        yield

        await registry.close()

    app = FastAPI(
        title="Schema Registry API",
        version=__version__,
        description="Stores named, versioned, typed schema documents.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/api/health")
    async def health_check(request: Request):
        """Verify API and database connectivity."""
        try:
            await request.app.state.registry.ping()
        except StorageUnavailable as e:
            return JSONResponse(
                status_code=503,
                content={"status": "error", "database": str(e.__cause__ or e)},
            )
        return {"status": "ok", "database": "connected"}

    app.include_router(schemas_router)
    return app
