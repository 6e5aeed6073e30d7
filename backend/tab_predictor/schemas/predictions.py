from typing import List, Literal, Optional
from pydantic import BaseModel, Field, computed_field, field_validator

from tab_predictor.core.config import Settings
from tab_predictor.schemas.patterns import BrowsingPattern, MAX_SEQUENCE_LENGTH
from tab_predictor.schemas.visits import VisitRecord

PredictionReason = Literal["sequential", "temporal", "contextual", "ml-based"]
SuggestedAction = Literal["open", "switch", "preload"]

PRELOAD_CONFIDENCE = 0.7


class PredictorConfig(BaseModel):
    """Tuning knobs for mining and prediction

    Out-of-range values are clamped instead of rejected so a bad setting never
    blocks predictions.
    """

    enabled: bool = Field(True, description="Master switch for prediction cycles")
    min_pattern_occurrences: int = Field(2, description="Patterns seen fewer times are ignored")
    min_confidence_threshold: float = Field(0.3, description="Predictions below this confidence are dropped")
    max_predictions_shown: int = Field(3, description="Result size cap")
    history_lookback_days: int = Field(7, description="How far back to read history")
    history_max_visits: int = Field(100, description="Cap on the number of visits mined")
    context_size: int = Field(3, description="Trailing domains used as the current context")
    update_interval_ms: int = Field(30000, description="Refresh period for background cycles")

    @field_validator("min_pattern_occurrences", "max_predictions_shown", "history_lookback_days")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(1, value)

    @field_validator("min_confidence_threshold")
    @classmethod
    def _unit_interval(cls, value: float) -> float:
        return min(1.0, max(0.0, value))

    @field_validator("history_max_visits")
    @classmethod
    def _at_least_two_visits(cls, value: int) -> int:
        return max(2, value)

    @field_validator("context_size")
    @classmethod
    def _context_bounds(cls, value: int) -> int:
        return min(MAX_SEQUENCE_LENGTH, max(1, value))

    @field_validator("update_interval_ms")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        return max(0, value)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PredictorConfig":
        return cls(
            enabled=settings.predictor_enabled,
            min_pattern_occurrences=settings.min_pattern_occurrences,
            min_confidence_threshold=settings.min_confidence_threshold,
            max_predictions_shown=settings.max_predictions_shown,
            history_lookback_days=settings.history_lookback_days,
            history_max_visits=settings.history_max_visits,
            context_size=settings.context_size,
            update_interval_ms=settings.update_interval_ms,
        )


class TabPrediction(BaseModel):
    """One candidate next visit"""

    domain: str = Field(..., description="Predicted domain")
    url: str = Field(..., description="URL to open")
    title: str = Field(..., description="Title to show")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Prediction confidence")
    reason: PredictionReason = Field("sequential", description="Which signal produced the prediction")
    suggested_action: SuggestedAction = Field("open", description="What the UI should do with it")
    patterns: List[str] = Field(default_factory=list, description="Signatures of contributing patterns")

    @computed_field
    @property
    def justification(self) -> str:
        """Human-readable explanation of the prediction"""
        if not self.patterns:
            return f"{self.domain} predicted with {round(self.confidence * 100)}% confidence"
        return (
            f"After {self.patterns[0]} you usually visit {self.domain} "
            f"({round(self.confidence * 100)}% confidence)"
        )


class PredictionMetrics(BaseModel):
    """Aggregate prediction-quality counters"""

    patterns_detected: int = Field(0, description="Patterns found by the latest mining run")
    sequences_learned: int = Field(0, description="Latest patterns meeting the occurrence minimum")
    predictions_generated: int = Field(0, description="Predictions produced across all cycles")
    avg_confidence: float = Field(0.0, description="Mean confidence of all generated predictions")
    predictions_shown: int = Field(0, description="Predictions surfaced to the user")
    user_clicked_prediction: int = Field(0, description="Predictions the user clicked")
    predictions_evaluated: int = Field(0, description="Visits checked against live predictions")
    correct_predictions: int = Field(0, description="Evaluated visits that hit a live prediction")
    accuracy: float = Field(0.0, description="Percentage of evaluated visits that were predicted")
    cycles_run: int = Field(0, description="Completed mining and prediction cycles")


class PredictionFeedback(BaseModel):
    """Outcome reported by the presentation layer"""

    action: Literal["shown", "clicked", "visited"] = Field(..., description="What happened")
    domain: str = Field(..., description="Domain the outcome refers to")


class PredictionCycleResult(BaseModel):
    """Outputs of one mining and prediction cycle"""

    context: List[str] = Field(default_factory=list, description="Context the predictions were made for")
    patterns: List[BrowsingPattern] = Field(default_factory=list, description="Mined patterns")
    predictions: List[TabPrediction] = Field(default_factory=list, description="Ranked predictions")
    metrics: PredictionMetrics = Field(default_factory=PredictionMetrics, description="Metrics snapshot")
    processing_time_ms: float = Field(0.0, description="Cycle duration in milliseconds")


class PredictionsResponse(BaseModel):
    """Response schema for cached predictions"""

    predictions: List[TabPrediction] = Field(..., description="Ranked predictions")


class ComputePredictionsRequest(BaseModel):
    """Stateless request: mine the supplied visits and predict from them"""

    visits: List[VisitRecord] = Field(..., description="Visits in chronological order")
    context: Optional[List[str]] = Field(None, description="Explicit context; defaults to the trailing visits")
    config: Optional[PredictorConfig] = Field(None, description="Overrides for the configured defaults")
    now: Optional[int] = Field(None, description="Reference time in milliseconds for recency scoring")
