# civitasfix/app.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import settings, validate_runtime_config
from .db import dispose_engine, init_db
from .exceptions import CivitasFixError
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware
from .routers import auth as auth_router
from .routers import notifications as notifications_router
from .routers import reports as reports_router
from .routers import stats as stats_router
from .routers import users as users_router
from .utils.uploads import PUBLIC_PREFIX, upload_dir

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting CivitasFix API (%s)", settings.ENVIRONMENT)
    yield
    logger.info("Shutting down CivitasFix API")
    dispose_engine()


def _error_response(status_code: int, message: str, code: str, **extra) -> JSONResponse:
    body = {"success": False, "message": message, "code": code}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CivitasFixError)
    async def civitasfix_error_handler(request: Request, exc: CivitasFixError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, _validation_message(exc), "VALIDATION_ERROR")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "Internal server error", "INTERNAL_ERROR")


def create_app() -> FastAPI:
    setup_logging()
    validate_runtime_config()

    app = FastAPI(title="CivitasFix API", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    register_exception_handlers(app)

    # Ensure DB tables exist after models are imported
    init_db()

    # --- Routers ---
    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(reports_router.router)
    app.include_router(notifications_router.router)
    app.include_router(stats_router.router)

    # Serve report images
    app.mount(PUBLIC_PREFIX, StaticFiles(directory=str(upload_dir())), name="uploads")

    @app.get("/health")
    def health():
        return {"success": True, "status": "ok", "version": __version__}

    return app


app = create_app()
