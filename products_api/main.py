"""
Products API — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       main() serves the module-level `app` with uvicorn.
Who:   uvicorn (`uvicorn products_api.main:app`) or the `products-api` script.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌────────┐ ┌─────────┐ ┌────────┐ ┌──────┐ ┌─────┐ │
    │  │ Req ID │→│ Logging │→│ Origin │→│ CORS │→│ 500 │ │
    │  │        │ │         │ │  Gate  │ │      │ │catch│ │
    │  └────────┘ └─────────┘ └────────┘ └──────┘ └─────┘ │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────────┐ ┌──────────────┐  │
    │  │ GET / and /products routes   │ │ GET /health  │  │
    │  └──────────────────────────────┘ └──────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ StorageError→400/500 │ RequestValidation→400 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, connect to the database and create tables
    Shutdown: dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from products_api import __version__
from products_api.config import ALLOWED_ORIGINS, settings
from products_api.database import dispose_engine, init_db
from products_api.exceptions import StorageError, describe_error
from products_api.middleware.errors import UnexpectedErrorMiddleware
from products_api.middleware.logging import RequestLoggingMiddleware
from products_api.middleware.origin_gate import OriginGateMiddleware
from products_api.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware
from products_api.routes import health, products
from products_api.services.product_service import BODY_ERRORS

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s"


def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Every line carries the request ID (or "-" outside a request), so a
    failure logged by the service layer can be matched to its access line.
    Called once during app startup, before any other initialization.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # SQL echo and per-request server lines duplicate the access log
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Connect to the database and create missing tables
           (a failure is logged; the server still starts)
    Shutdown:
        1. Dispose database engine
    """
    setup_logging()
    logger.info("Products API %s starting up...", __version__)
    logger.info("CORS allow-list: %s", ", ".join(ALLOWED_ORIGINS))

    await init_db()

    logger.info("Server running on http://%s:%d", settings.host, settings.port)

    yield

    logger.info("Products API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the `{message, error}` envelope.

    Handler hierarchy:
        StorageError           → exc.status_code (400, or 500 for listing)
        RequestValidationError → 400 with the route's message (BODY_ERRORS)

    Anything else is answered by UnexpectedErrorMiddleware.
    """

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.warning("%s: %s | Context: %s", exc.message, exc.error, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "error": exc.error},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_body(request: Request, exc: RequestValidationError):
        message = BODY_ERRORS.get(request.method, "Invalid request")
        error = describe_error(exc)
        logger.warning(
            "Rejected body for %s %s: %s", request.method, request.url.path, error
        )
        return JSONResponse(status_code=400, content={"message": message, "error": error})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Middleware executes in REVERSE order of addition. Adding
    500 catch → CORS → Origin Gate → Logging → Request ID gives the
    execution order Request ID → Logging → Origin Gate → CORS → 500 catch.
    """
    app = FastAPI(
        title="Products API",
        description=(
            "Create, list, update and delete products, and count products "
            "above a price threshold."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    app.add_middleware(UnexpectedErrorMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(ALLOWED_ORIGINS),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(OriginGateMiddleware, allowed_origins=ALLOWED_ORIGINS)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(products.router)
    app.include_router(health.router)

    return app


# uvicorn expects `products_api.main:app` to be importable
app = create_app()


def main() -> None:
    """Serve the API on the configured host and port."""
    uvicorn.run(
        "products_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
