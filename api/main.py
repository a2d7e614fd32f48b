"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, updates
from core.config import settings
from core.database import dispose_engine
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware
from updater.scheduler import UpdaterScheduler

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="SG Cars Trends Updater API",
    description="Keeps LTA DataMall vehicle datasets in sync with the database",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

# Initialize Scheduler
scheduler = UpdaterScheduler()


# Include routers
app.include_router(health.router)
app.include_router(updates.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting SG Cars Trends Updater API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")

    if settings.SCHEDULER_ENABLED:
        scheduler.start()


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down SG Cars Trends Updater API")
    if scheduler.scheduler.running:
        scheduler.stop()
    await dispose_engine()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "SG Cars Trends Updater API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "updates": "/updates"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
