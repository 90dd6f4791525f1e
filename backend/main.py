"""
Sitewright - Conversational request router for AI website building
FastAPI backend: context -> intent -> capability -> envelope
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
import logging
import os

from fastapi import FastAPI

from routers import conversation
from logging_config import setup_logging
from config import runtime_config

setup_logging(runtime_config.log_level)
logger = logging.getLogger(__name__)


@dataclass
class StartupHealth:
    """Tracks component health through startup phases."""
    phase: str = "initializing"
    postgres: str = "pending"
    gateway: str = "pending"
    startup_complete: bool = False


_startup_health = StartupHealth()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events"""
    # Startup
    _startup_health.phase = "connecting"

    try:
        from services.database import get_database
        db = await get_database()
        _startup_health.postgres = "ok" if db.available else "degraded"
    except Exception as e:
        logger.warning(f"PostgreSQL init failed: {e}")
        _startup_health.postgres = "down"

    _startup_health.gateway = "configured" if runtime_config.gateway_api_key else "missing_key"
    if not runtime_config.gateway_api_key:
        logger.warning("LLM_GATEWAY_API_KEY not set; capability calls will fail")

    _startup_health.phase = "ready"
    _startup_health.startup_complete = True
    logger.info(f"Sitewright ready (gateway={runtime_config.gateway_url}, postgres={_startup_health.postgres})")

    yield

    # Shutdown
    try:
        from services.llm_client import close_llm_client
        await close_llm_client()
    except Exception as e:
        logger.debug(f"Gateway client close error: {e}")

    try:
        from services.database import close_database
        await close_database()
        logger.info("PostgreSQL connection closed")
    except Exception as e:
        logger.debug(f"PostgreSQL close error: {e}")

    logger.info("Sitewright signing off")


app = FastAPI(
    title="Sitewright",
    description="Routes chat messages to the right AI capability",
    version="1.0.0",
    lifespan=lifespan,
)

# Mounted at the root (edge-function path) and under /api. The conversation
# router answers its own preflight (204) and sets CORS headers on every response.
app.include_router(conversation.router, tags=["conversation"])
app.include_router(conversation.router, prefix="/api", tags=["conversation"])


@app.get("/health")
async def health():
    """Health check - data store and gateway configuration."""
    checks = {}

    try:
        from services.database import get_database
        db = await get_database()
        db_health = await db.health_check()
        checks["postgres"] = db_health.get("status", "unknown")
    except Exception:
        checks["postgres"] = "down"

    checks["gateway"] = "configured" if runtime_config.gateway_api_key else "missing_key"

    all_ok = checks["postgres"] in ("connected", "disabled") and checks["gateway"] == "configured"
    return {
        "status": "healthy" if all_ok else "degraded",
        "service": "sitewright",
        "checks": checks,
        "startup_phase": _startup_health.phase,
        "startup_complete": _startup_health.startup_complete,
        "config": runtime_config.to_dict(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
