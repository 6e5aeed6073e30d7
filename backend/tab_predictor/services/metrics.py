from typing import List, Sequence
from loguru import logger

from tab_predictor.schemas.patterns import BrowsingPattern
from tab_predictor.schemas.predictions import PredictionMetrics, TabPrediction


class MetricsStore:
    """Mutable prediction-quality counters owned by the caller

    Created at session start, updated once per cycle and by feedback, read by
    presentation code through snapshot().
    """

    def __init__(self):
        self._metrics = PredictionMetrics()
        self._confidence_total = 0.0

    def snapshot(self) -> PredictionMetrics:
        return self._metrics.model_copy()

    def reset(self) -> PredictionMetrics:
        """Reinitialize every counter"""
        self._metrics = PredictionMetrics()
        self._confidence_total = 0.0
        logger.info("Prediction metrics reset")
        return self.snapshot()

    def record_mining(self, patterns: Sequence[BrowsingPattern], min_pattern_occurrences: int) -> None:
        self._metrics.patterns_detected = len(patterns)
        self._metrics.sequences_learned = sum(1 for p in patterns if p.frequency >= min_pattern_occurrences)

    def record_predictions(self, predictions: List[TabPrediction]) -> None:
        self._metrics.cycles_run += 1
        if not predictions:
            return

        self._metrics.predictions_generated += len(predictions)
        self._confidence_total += sum(p.confidence for p in predictions)
        self._metrics.avg_confidence = self._confidence_total / self._metrics.predictions_generated

    def record_shown(self, count: int = 1) -> None:
        self._metrics.predictions_shown += max(0, count)

    def record_click(self) -> None:
        self._metrics.user_clicked_prediction += 1

    def record_visit(self, domain: str, live_predictions: List[TabPrediction]) -> bool:
        """Score an actual visit against the live predictions

        Returns True when the visited domain was among them.
        """
        if not live_predictions:
            return False

        hit = any(prediction.domain == domain for prediction in live_predictions)
        self._metrics.predictions_evaluated += 1
        if hit:
            self._metrics.correct_predictions += 1
        self._metrics.accuracy = self._metrics.correct_predictions / self._metrics.predictions_evaluated * 100
        return hit
