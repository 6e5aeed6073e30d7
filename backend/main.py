import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
import uvicorn

from tab_predictor.core.config import settings
from tab_predictor.core.database import init_db
from tab_predictor.api.v1.api import api_router
from tab_predictor.schemas.predictions import PredictorConfig
from tab_predictor.services.prediction_service import PredictionService
from tab_predictor.services.refresher import PredictionRefresher

logger.remove()
logger.add(sys.stderr, level=settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the session-wide prediction service, then keep it refreshed"""
    init_db()

    config = PredictorConfig.from_settings(settings)
    service = PredictionService(config)
    refresher = PredictionRefresher(service, config.update_interval_ms)
    app.state.prediction_service = service

    if config.enabled:
        await refresher.start()
    else:
        logger.info("Tab predictions disabled")

    yield

    await refresher.stop()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Learns recurring browsing sequences and predicts the next tab",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=f"{settings.api_prefix}/v1")


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Tab Predictor API",
        "version": settings.app_version,
        "docs": "/docs",
        "health": f"{settings.api_prefix}/v1/health",
    }


if __name__ == "__main__":
    uvicorn.run(
        "main:app", host=settings.api_host, port=settings.api_port, reload=True, log_level=settings.log_level.lower()
    )
