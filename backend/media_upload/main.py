from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from typing import Optional
import logging

from media_upload.api.routes.files import router as files_router
from media_upload.api.routes.uploads import router as uploads_router
from media_upload.config import constants as C
from media_upload.config.logging import setup_logging
from media_upload.config.settings import Settings, load_settings
from media_upload.core.file_utils.storage import LocalStorage
from media_upload.core.image_utils.compression import ImageCompressor
from media_upload.domains.cleanup.in_use import build_in_use_provider
from media_upload.domains.cleanup.scheduler import CleanupScheduler
from media_upload.shared.exceptions import BaseAppError

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the upload service.

    Settings are read once here (environment / .env when not given) and
    shared with handlers through app.state.
    """
    if settings is None:
        settings = load_settings()
    setup_logging(debug=settings.DEBUG)

    app = FastAPI(
        title="Media Upload Backend",
        description="Upload, compress, serve and clean up image/video files",
        version=APP_VERSION,
    )

    logger.info("[Server] CORS allowed origins: %s", settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", C.API_KEY_HEADER],
    )

    storage = LocalStorage(settings.UPLOAD_DIR, settings.PUBLIC_URL_PREFIX)
    storage.ensure_dir()
    logger.info("[Server] Upload directory: %s", storage.root)

    app.state.settings = settings
    app.state.storage = storage
    app.state.compressor = ImageCompressor.from_settings(settings, storage.root)
    app.state.cleanup = CleanupScheduler(
        storage.root,
        build_in_use_provider(settings),
        crontab=settings.CLEANUP_CRON,
        timezone=settings.CLEANUP_TIMEZONE,
    )

    app.include_router(uploads_router)
    app.include_router(files_router)

    @app.exception_handler(BaseAppError)
    async def app_error_handler(request: Request, exc: BaseAppError):
        if exc.status_code >= 500:
            # Traceback of the wrapped cause, if any.
            logger.error(
                "[Server] %s %s -> %d %s",
                request.method, request.url.path, exc.status_code, exc,
                exc_info=exc.__cause__,
            )
        else:
            logger.warning("[Server] %s %s -> %d %s", request.method, request.url.path, exc.status_code, exc)
        return exc.to_response()

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning("[Server] %s %s -> 400 invalid request", request.method, request.url.path)
        return JSONResponse(
            status_code=400,
            content={
                "message": "Invalid request",
                "code": "validation_error",
                "details": {"errors": jsonable_encoder(
                    [{k: e.get(k) for k in ("loc", "msg", "type")} for e in exc.errors()]
                )},
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("[Server] Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"message": "Internal Server Error", "error": str(exc)},
        )

    app.mount(storage.public_prefix, StaticFiles(directory=storage.root), name="uploads")

    @app.on_event("startup")
    async def on_startup():
        logger.info("[Startup] Application starting (debug=%s)", settings.DEBUG)
        if settings.CLEANUP_ENABLED:
            app.state.cleanup.start()

    @app.on_event("shutdown")
    async def on_shutdown():
        app.state.cleanup.shutdown()
        logger.info("[Shutdown] Application stopped")

    @app.get("/")
    async def root():
        return {"message": "Media Upload Backend API", "version": APP_VERSION}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "scheduler": app.state.cleanup.running}

    return app
