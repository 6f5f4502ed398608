import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from vendor_insights.adapters.sqlite.migrator import SQLiteMigrator
from vendor_insights.api.deps import get_settings
from vendor_insights.core.errors import InvalidWindowError, StoreUnavailableError
from vendor_insights.rules.loader import load_rules

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and prepare the store on startup (fail-fast)
    try:
        load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    except Exception:
        logger.critical("Startup failed", exc_info=True)
        sys.exit(1)

    yield


app = FastAPI(
    title="Vendor Insights API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# --- Error mapping ---
@app.exception_handler(InvalidWindowError)
async def invalid_window_handler(request: Request, exc: InvalidWindowError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Event store unavailable"},
    )


# --- Routers ---
from vendor_insights.api.routes import dashboard, events, hours  # noqa: E402

app.include_router(dashboard.router, prefix="/api/tenants/{tenant_id}/analytics", tags=["Analytics"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(hours.router, prefix="/api", tags=["Hours"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "vendor-insights"}
