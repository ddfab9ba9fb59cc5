"""
Venue Compliance Engine - Application Entry Point

FastAPI application serving the checklist routes, with the auto-tick
poller running in the background.
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI

from config import settings
from .database import init_database, close_database, get_database
from .integrations.activity_signals import get_activity_signal_source
from .scheduler.jobs import SchedulerManager
from .services.auto_tick import AutoTickCorrelator
from .web.routes import router


def setup_logging() -> None:
    """Configure root logging once for the host process."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )
    # SQL echo is controlled by database_echo, not the app log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")

    try:
        if await init_database():
            logger.info("Database initialized")
        else:
            logger.warning("Database not configured or failed to initialize")
    except Exception as e:
        logger.warning(f"Database init failed: {e}")

    scheduler = None
    try:
        correlator = AutoTickCorrelator(get_activity_signal_source())
        scheduler = SchedulerManager(correlator)
        scheduler.start()
    except Exception as e:
        logger.warning(f"Scheduler failed: {e}")
    app.state.scheduler = scheduler

    logger.info(f"{settings.app_name} started successfully")

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    if scheduler:
        scheduler.stop()
    await close_database()
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Recurring compliance checklists with completion tracking, auto-tick and sign-off",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/")
async def root():
    return {"status": "ok", "service": settings.app_name}


@app.get("/health")
async def health_check():
    """Health check for monitoring."""
    db_health = await get_database().health_check()
    scheduler = getattr(app.state, "scheduler", None)
    return {
        "status": "healthy" if db_health.get("status") == "healthy" else "degraded",
        "timestamp": datetime.now().isoformat(),
        "database": db_health,
        "scheduler": {
            "running": bool(scheduler and scheduler.scheduler and scheduler.scheduler.running),
            "last_run": scheduler.last_run if scheduler else {},
        },
    }


@app.post("/admin/auto-tick/run")
async def run_auto_tick():
    """Run one auto-tick pass immediately."""
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is None:
        correlator = AutoTickCorrelator(get_activity_signal_source())
        scheduler = SchedulerManager(correlator)
    created = await scheduler.run_now()
    return {"ok": True, "created": created}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "compliance_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
