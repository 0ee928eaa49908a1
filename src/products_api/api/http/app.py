"""FastAPI application setup and lifecycle."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.products_api.api.http.app_data import ApplicationDependencies
from src.products_api.api.http.routers.health import router as health_router
from src.products_api.api.http.routers.products import router as products_router
from src.products_api.api.utils.app_startup import configure_logging
from src.products_api.core.services import DbSessionService
from src.products_api.runtime.config.config_data import ConfigData
from src.products_api.runtime.context import get_config

main_config = get_config()

configure_logging()


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.hsts = hsts

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        if self.hsts:
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )
        return response


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


def install_middleware(application: FastAPI, config: ConfigData) -> None:
    """Add the HTTP middleware stack to ``application``.

    Starlette wraps each added middleware around the previous ones, so the
    last one added sees the request first. CORS is added last so that every
    response, including the 500 built by ``log_requests``, carries the
    CORS headers the browser front end needs.
    """
    app_config = config.app
    cors = app_config.cors
    if cors.allow_credentials and "*" in cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' origins with allow_credentials=True"
        )

    application.add_middleware(BaseHTTPMiddleware, dispatch=log_requests)
    application.add_middleware(
        SecurityHeadersMiddleware, hsts=app_config.environment == "production"
    )
    if app_config.https_redirect:
        application.add_middleware(HTTPSRedirectMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="Products API",
    lifespan=lifespan,
    docs_url="/docs" if main_config.app.docs_enabled else None,
    redoc_url="/redoc" if main_config.app.docs_enabled else None,
    openapi_url="/openapi.json" if main_config.app.docs_enabled else None,
)

# expose startup for tests
__all__ = ["app", "startup", "shutdown"]

install_middleware(app, main_config)

# --- Router registration ---
app.include_router(health_router)
app.include_router(products_router)


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    database_service = DbSessionService()
    if config.database.create_tables:
        database_service.create_all()

    app.state.app_dependencies = ApplicationDependencies(
        database_service=database_service,
    )


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()
