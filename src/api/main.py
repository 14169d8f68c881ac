"""
County Compass - FastAPI Application
Read-only API for serving the county dataset and its statistics
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from src.api.routes import router
from src.ingest.county_data import get_dataset
from src.utils.logging import setup_logging

settings = get_settings()
logger = setup_logging("api")


def _parse_cors_allow_origins(raw: str) -> list[str]:
    origins = [origin.strip() for origin in (raw or "").split(",") if origin.strip()]
    return origins or ["http://localhost:3000", "http://127.0.0.1:3000"]


def dataset_available() -> bool:
    """True when the county dataset loads."""
    try:
        get_dataset()
        return True
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"County dataset failed to load: {e}")
        return False


# Initialize FastAPI app
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_cors_allow_origins(settings.CORS_ALLOW_ORIGINS),
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    """Run on application startup"""
    logger.info(f"Starting {settings.API_TITLE} v{settings.API_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    if not dataset_available():
        # Don't raise - allow app to start but health check will fail
        logger.error("County dataset unavailable on startup")


@app.on_event("shutdown")
async def shutdown_event():
    """Run on application shutdown"""
    logger.info("Shutting down API")


@app.get("/")
async def root():
    """
    Root endpoint - API information
    """
    return {
        "name": settings.API_TITLE,
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
        "docs": "/docs" if settings.DEBUG else "disabled in production",
        "endpoints": {
            "health": "/health",
            "counties": "/api/v1/counties",
            "county_detail": "/api/v1/counties/{county_id}",
            "search": "/api/v1/counties/search?q=",
            "statistics": "/api/v1/statistics",
            "presets": "/api/v1/presets",
            "median_preset": "/api/v1/presets/median",
            "compare": "/api/v1/compare?ids=",
            "map_layer": "/api/v1/layers/{layer}",
        },
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring
    """
    healthy = dataset_available()

    return {
        "status": "healthy" if healthy else "degraded",
        "dataset": "loaded" if healthy else "unavailable",
        "environment": settings.ENVIRONMENT,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
