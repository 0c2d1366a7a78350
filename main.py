"""
Backend entry point for the event scheduling service.

Architecture:
- One Python process, one asyncio event loop
- FastAPI serves the scheduler trigger and event endpoints
- Optionally, APScheduler runs the same jobs on cron triggers in-process
  (ENABLE_INTERNAL_SCHEDULER=true); otherwise an external cron calls
  the trigger endpoints

Run with: python main.py [--port PORT] [--internal-scheduler]
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

# Load .env first, then .env.local overrides (gitignored, for local dev)
project_root = Path(__file__).parent
load_dotenv(project_root / ".env")
load_dotenv(project_root / ".env.local", override=True)

import sentry_sdk
from fastapi import FastAPI

from core.config import check_required_env_vars, get_api_port, is_internal_scheduler_enabled
from core.database import close_engine
from core.scheduler import init_scheduler, shutdown_scheduler
from web_api.routes.events import router as events_router
from web_api.routes.scheduler import router as scheduler_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

if os.getenv("SENTRY_DSN"):
    sentry_sdk.init(
        dsn=os.environ["SENTRY_DSN"],
        environment=os.getenv("RAILWAY_ENVIRONMENT", "development"),
        traces_sample_rate=0.0,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Starts the in-process scheduler when enabled and closes database
    connections on shutdown.
    """
    ok, warnings = check_required_env_vars()
    for warning in warnings:
        logger.warning(warning.strip())
    if not ok:
        raise RuntimeError("Missing required environment variables")

    if is_internal_scheduler_enabled():
        init_scheduler()

    yield

    shutdown_scheduler()
    await close_engine()  # Close database connections


app = FastAPI(
    title="Fitness Event Scheduling API",
    lifespan=lifespan,
)

app.include_router(scheduler_router)
app.include_router(events_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "internal_scheduler": is_internal_scheduler_enabled(),
    }


if __name__ == "__main__":
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Fitness Event Scheduling Server")
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: API_PORT or 8000)",
    )
    parser.add_argument(
        "--internal-scheduler",
        action="store_true",
        help="Run the cron jobs in this process",
    )
    args = parser.parse_args()

    # Set env var so it persists across uvicorn reloads
    if args.internal_scheduler:
        os.environ["ENABLE_INTERNAL_SCHEDULER"] = "true"

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
