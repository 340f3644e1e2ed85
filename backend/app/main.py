"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.config import Settings, get_settings
from app.api.v1 import router as api_v1_router
from app.database import Database
from app.services.region_resolver import KakaoRegionResolver
from app.services.storage_local import LocalStorageBackend

logger = logging.getLogger("app")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    # Created eagerly so a bad upload directory fails at startup
    storage = LocalStorageBackend(
        settings.UPLOAD_DIR,
        public_base_url=settings.PUBLIC_BASE_URL,
        url_path=settings.UPLOAD_URL_PATH,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        logger.info(f"Starting {settings.APP_NAME}...")
        database = Database(settings.DATABASE_URL, echo=settings.DEBUG)
        await database.connect(create_tables=settings.DB_CREATE_TABLES)
        region_resolver = KakaoRegionResolver.from_settings(settings)
        if not settings.KAKAO_REST_API_KEY:
            logger.warning("KAKAO_REST_API_KEY is empty; every region lookup will report a failed call")

        app.state.database = database
        app.state.region_resolver = region_resolver
        app.state.storage = storage
        yield
        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await region_resolver.aclose()
        await database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        description="동네 기반 소셜 피드 백엔드",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.dependency_overrides[get_settings] = lambda: settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Rejected inputs are not echoed; NaN/Infinity cannot be rendered as JSON
        errors = [{k: v for k, v in error.items() if k != "input"} for error in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": jsonable_encoder(errors)},
        )

    # Include API routers
    app.include_router(api_v1_router, prefix=settings.API_PREFIX)

    app.mount(
        settings.UPLOAD_URL_PATH,
        StaticFiles(directory=str(Path(settings.UPLOAD_DIR))),
        name="uploads",
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "app": settings.APP_NAME}

    return app


app = create_app()
