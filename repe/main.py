"""FastAPI application factory and lifespan."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from repe import __version__
from repe.api.v1 import api_router
from repe.core.config import Settings, get_settings
from repe.core.errors import ErrorCode, StorageError, error_body
from repe.core.logging import configure_logging
from repe.db.session import Database

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: logging; shutdown: dispose the engine."""
    configure_logging(app.state.settings.log_level)
    logger.info("%s %s starting", app.state.settings.app_name, __version__)
    yield
    await app.state.database.dispose()


def _cors_origins(settings: Settings) -> list[str]:
    if settings.debug:
        return ["*"]
    if settings.environment == "development":
        return ["http://localhost:3000", "http://127.0.0.1:3000"]
    return [o.strip() for o in settings.cors_origins.split(",") if o.strip()]


def register_exception_handlers(app: FastAPI) -> None:
    """Every failure leaves as ``{success: false, error: {code, message, details?}}``."""

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.details)
        return JSONResponse(
            status_code=exc.status_code,
            content=jsonable_encoder(error_body(exc.code, exc.message, exc.details)),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder(
                error_body(ErrorCode.VALIDATION_ERROR, "Invalid request", exc.errors())
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = _STATUS_CODES.get(exc.status_code, ErrorCode.BAD_REQUEST)
        if exc.status_code >= 500:
            code = ErrorCode.INTERNAL_ERROR
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body(ErrorCode.INTERNAL_ERROR, "Internal server error"),
        )


def create_application(
    settings: Settings | None = None, database: Database | None = None
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.database = database or Database(settings=settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(settings),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/")
    def root():
        return {"status": "ok", "message": settings.app_name}

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_application()
