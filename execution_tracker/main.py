import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from execution_tracker.config import get_settings
from execution_tracker.database import init_db
from execution_tracker.api.routes import dashboard, photos, slack, stores, sync

settings = get_settings()

# Configure application logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Set log level for app modules
logger = logging.getLogger("execution_tracker")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.app_name} started (database: {settings.database_url})")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Slack execution photo backfill, triage and payout tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(sync.router, prefix="/api/sync", tags=["Sync"])
app.include_router(slack.router, prefix="/api/slack", tags=["Slack"])
app.include_router(photos.router, prefix="/api/photos", tags=["Triage"])
app.include_router(stores.stores_router, prefix="/api/stores", tags=["Stores"])
app.include_router(stores.brands_router, prefix="/api/brands", tags=["Brands"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": "0.1.0",
        "endpoints": {
            "sync": "/api/sync",
            "slack_events": "/api/slack/events",
            "photos": "/api/photos",
            "stores": "/api/stores",
            "brands": "/api/brands",
            "dashboard": "/api/dashboard/payouts",
            "health": "/health",
            "docs": "/docs",
            "redoc": "/redoc",
        },
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}
