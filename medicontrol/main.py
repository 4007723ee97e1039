# Main application file

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from medicontrol.core.config import Settings, settings as default_settings
from medicontrol.core.exceptions import MediControlError, StorageError
from medicontrol.core.hashing import hash_password
from medicontrol.core.rate_limiter import limiter
from medicontrol.routers import (
    auth,
    categories,
    medications,
    movements,
    registry,
    reports,
    sales,
)
from medicontrol.services.bootstrap import init_storage


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("app")


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.storage = init_storage(settings)
        app.state.admin_password_hash = hash_password(
            settings.ADMIN_PASSWORD, rounds=settings.BCRYPT_ROUNDS
        )
        logger.info(f"MediControl ready ({settings.ENV})")
        yield
        app.state.storage.dispose()

    # APP INIT

    app = FastAPI(
        title="MediControl API",
        description="Pharmacy inventory, stock movements and sales",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS (Token-based auth)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # RATE LIMITING

    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(
        RateLimitExceeded,
        _rate_limit_exceeded_handler
    )

    # ERROR RENDERING

    @app.exception_handler(MediControlError)
    async def medicontrol_error_handler(request: Request, exc: MediControlError):
        if isinstance(exc, StorageError):
            logger.error(f"{request.method} {request.url.path} failed: {exc.kind}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    # REQUEST LOGGING MIDDLEWARE

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = round((time.time() - start_time) * 1000, 2)

        logger.info(
            f"{request.method} {request.url.path} "
            f"Status: {response.status_code} "
            f"Time: {duration}ms"
        )

        return response

    # ROUTERS

    app.include_router(auth.router)
    app.include_router(medications.router)
    app.include_router(categories.router)
    app.include_router(registry.router)
    app.include_router(movements.router)
    app.include_router(sales.router)
    app.include_router(reports.router)

    # HEALTH

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
