from fastapi import APIRouter
from tab_predictor.api.v1.endpoints import health, visits, predictions

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(visits.router, tags=["visits"])
api_router.include_router(predictions.router, tags=["predictions"])
