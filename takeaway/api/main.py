"""Takeaway order-management FastAPI application: entry point.

Start with:
    uvicorn takeaway.api.main:app --reload --host 0.0.0.0 --port 8000

The acting user is read from the X-Actor-Id header (default "system").
Set ADMIN_API_KEY to require an X-Api-Key header on every /api/v1 route.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from takeaway.api.errors import register_error_handlers
from takeaway.config import AppSettings, load_app_settings
from takeaway.core.exceptions import ConfigurationError
from takeaway.core.logger import configure
from takeaway.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)

logger = logging.getLogger(__name__)


def _load_settings() -> AppSettings:
    try:
        return load_app_settings()
    except ValueError as exc:
        raise ConfigurationError(f"Invalid application settings: {exc}", cause=exc) from exc


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()
    app.state.settings = _load_settings()

    await ensure_database_exists()
    engine = build_engine()
    app.state.session_factory = build_session_factory(engine)
    await init_db()
    logger.info(
        "API: ready (prefix=%s tz=%s currency=%s)",
        app.state.settings.order_number_prefix,
        app.state.settings.timezone_name,
        app.state.settings.currency,
    )

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await close_engine()
    logger.info("API: engine disposed")


app = FastAPI(
    title="Takeaway Orders API",
    version="1.0.0",
    description="Order management for a seasonal takeaway food service: guests, orders, payments and sales analytics.",
    lifespan=lifespan,
)

register_error_handlers(app)

# Rate limiter: limit is configurable via API_RATE_LIMIT env var (default 120/minute)
_api_rate_limit = os.environ.get("API_RATE_LIMIT", "120/minute")
limiter = Limiter(key_func=get_remote_address, default_limits=[_api_rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS: allow the staff dashboard dev server and any configured origin
_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Optional API key authentication ──────────────────────────────
# With ADMIN_API_KEY set, /api/v1/* requires the header X-Api-Key: <value>.
# Without it the check is skipped (dev/open mode).
_ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY", "").strip() or None


@app.middleware("http")
async def api_key_middleware(request: Request, call_next):
    if _ADMIN_API_KEY and request.url.path.startswith("/api/v1"):
        provided = request.headers.get("X-Api-Key")
        if provided != _ADMIN_API_KEY:
            return JSONResponse(
                status_code=401,
                content={"detail": "Unauthorized: set X-Api-Key header", "code": "UNAUTHORIZED"},
            )
    return await call_next(request)


# ── Routers ───────────────────────────────────────────────────────
from takeaway.api.routers import analytics, enquiries, guests, menu_items, orders  # noqa: E402

app.include_router(orders.router, prefix="/api/v1")
app.include_router(guests.router, prefix="/api/v1")
app.include_router(analytics.router, prefix="/api/v1")
app.include_router(enquiries.router, prefix="/api/v1")
app.include_router(menu_items.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
