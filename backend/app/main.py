from fastapi import FastAPI

from loguru import logger

from backend.app.config import settings
from backend.app.api.v1.router import api_v1_router
from backend.app.db.connection import initialize_connection_pool, close_connection_pool
from backend.app.services.data_manager import get_tiered_cache, shutdown_shared_instances

app = FastAPI(title="WordPress.org Plugin Reviews API")
logger.info("Main FastAPI application instance created.")


@app.on_event("startup")
def startup_event():
    logger.info("FastAPI Event: Application startup initiated...")
    try:
        initialize_connection_pool()
    except ConnectionError as e:
        logger.critical(
            f"Store database unavailable, products will report no WordPress.org data: {e}"
        )

    get_tiered_cache()
    logger.info("FastAPI Event: Application startup complete.")


@app.on_event("shutdown")
def shutdown_event():
    logger.info("FastAPI Event: Application shutdown initiated...")
    shutdown_shared_instances()
    close_connection_pool()
    logger.info("FastAPI Event: Application shutdown complete.")


# --- V1 API router ---
app.include_router(api_v1_router, prefix="/api/v1")


# --- Root and Health Endpoints ---
@app.get("/")
async def root():
    logger.debug("API GET / (FastAPI root) called.")
    return {
        "message": "WordPress.org Plugin Reviews API",
        "api_docs_url": "/docs",
        "redoc_url": "/redoc",
        "health_check": "/health",
        "wporg_api_url": settings.wporg.api_url,
    }


@app.get("/health", tags=["Health Check"])
async def health_check():
    return {"status": "ok", "message": "API is healthy"}
