from pydantic import BaseModel, Field
from datetime import datetime


class HealthResponse(BaseModel):
    """Basic health check response"""

    status: str = Field(..., description="Status of the API")
    app_name: str = Field(..., description="Name of the application")
    version: str = Field(..., description="Version of the application")
    timestamp: datetime = Field(..., description="Current UTC timestamp")
    predictor_enabled: bool = Field(..., description="Whether prediction cycles run")
