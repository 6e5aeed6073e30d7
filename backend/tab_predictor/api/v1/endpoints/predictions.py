from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from tab_predictor.api.deps import get_prediction_service
from tab_predictor.schemas.patterns import PatternListResponse
from tab_predictor.schemas.predictions import (
    ComputePredictionsRequest,
    PredictionCycleResult,
    PredictionFeedback,
    PredictionMetrics,
    PredictionsResponse,
)
from tab_predictor.services.prediction_service import PredictionService

router = APIRouter()


@router.get("/predictions", response_model=PredictionsResponse)
async def get_predictions(service: PredictionService = Depends(get_prediction_service)):
    """Return the predictions computed by the latest cycle"""
    return PredictionsResponse(predictions=service.current_predictions)


@router.post("/predictions/refresh", response_model=PredictionCycleResult)
async def refresh_predictions(service: PredictionService = Depends(get_prediction_service)):
    """Run a mining and prediction cycle over the stored history now"""
    return await service.run_cycle()


@router.post("/predictions/compute", response_model=PredictionCycleResult)
async def compute_predictions(
    request: ComputePredictionsRequest, service: PredictionService = Depends(get_prediction_service)
):
    """
    Mine the supplied visits and predict from them

    Nothing is stored and the session metrics are left untouched.
    """
    try:
        result = service.compute(request.visits, context=request.context, config=request.config, now=request.now)
        logger.info(f"Computed {len(result.predictions)} predictions from {len(request.visits)} visits")
        return result

    except Exception as e:
        logger.error(f"Error computing predictions: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Prediction failed: {str(e)}"
        )


@router.post("/predictions/feedback", response_model=PredictionMetrics)
async def record_feedback(feedback: PredictionFeedback, service: PredictionService = Depends(get_prediction_service)):
    """Record that a prediction was shown or clicked, or that a domain was visited"""
    return service.record_feedback(feedback)


@router.post("/predictions/disable")
async def disable_predictions(service: PredictionService = Depends(get_prediction_service)):
    """Clear the cached predictions"""
    service.disable()
    return {"success": True}


@router.get("/patterns", response_model=PatternListResponse)
async def get_patterns(
    min_frequency: int = 1, limit: int = 100, service: PredictionService = Depends(get_prediction_service)
):
    """
    Retrieve the patterns mined by the latest cycle

    Args:
        min_frequency: Only return patterns seen at least this often
        limit: Maximum number of patterns to return
    """
    patterns = [p for p in service.latest_patterns if p.frequency >= min_frequency][: max(0, limit)]
    return PatternListResponse(patterns=patterns, total=len(patterns))


@router.get("/metrics", response_model=PredictionMetrics)
async def get_metrics(service: PredictionService = Depends(get_prediction_service)):
    """Snapshot of the prediction-quality counters"""
    return service.metrics.snapshot()


@router.post("/metrics/reset", response_model=PredictionMetrics)
async def reset_metrics(service: PredictionService = Depends(get_prediction_service)):
    """Reinitialize the prediction-quality counters"""
    return service.reset_metrics()
