from fastapi import Request

from tab_predictor.services.prediction_service import PredictionService


def get_prediction_service(request: Request) -> PredictionService:
    """Session-wide prediction service created at application startup"""
    return request.app.state.prediction_service
