import time
from typing import Callable, Dict, List, Optional
from sqlalchemy.orm import Session
from loguru import logger

from tab_predictor.core.database import SessionLocal
from tab_predictor.schemas.patterns import BrowsingPattern
from tab_predictor.schemas.predictions import (
    PredictionCycleResult,
    PredictionFeedback,
    PredictionMetrics,
    PredictorConfig,
    TabPrediction,
)
from tab_predictor.schemas.visits import VisitRecord
from tab_predictor.services.history_service import HistoryService
from tab_predictor.services.metrics import MetricsStore
from tab_predictor.services.pattern_miner import PatternMiner
from tab_predictor.services.predictor import Predictor
from tab_predictor.services.utils import get_current_context


class PredictionService:
    """Runs mining and prediction cycles and keeps the last computed predictions"""

    def __init__(
        self,
        config: Optional[PredictorConfig] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        metrics: Optional[MetricsStore] = None,
    ):
        self.config = config or PredictorConfig()
        self.session_factory = session_factory
        self.metrics = metrics or MetricsStore()
        self.miner = PatternMiner()
        self.predictor = Predictor(self.config)

        self.current_predictions: List[TabPrediction] = []
        self.latest_patterns: List[BrowsingPattern] = []
        self.latest_context: List[str] = []

    async def run_cycle(
        self, history: Optional[List[VisitRecord]] = None, now: Optional[int] = None
    ) -> PredictionCycleResult:
        """Hierarchical prediction: history -> patterns -> context -> predictions

        Failures are logged and leave an empty prediction list; they never raise.
        """
        start_time = time.perf_counter()

        if not self.config.enabled:
            logger.info("Tab predictions disabled")
            return PredictionCycleResult(metrics=self.metrics.snapshot())

        try:
            # Step 1: Load the recent window of history
            if history is None:
                history = await self._load_history(now)
            history = [visit for visit in history if visit.is_well_formed]

            if not history:
                logger.info("No browsing history available")

            # Step 2: Mine patterns
            patterns = self.miner.mine(history, now=now)
            self.metrics.record_mining(patterns, self.config.min_pattern_occurrences)

            # Step 3: Predict from the current context
            context = get_current_context(history, self.config.context_size)
            predictions = self.predictor.predict(context, patterns, self.config)
            predictions = self._attach_pages(predictions, history)
            self.metrics.record_predictions(predictions)

            self.latest_patterns = patterns
            self.latest_context = context
            self.current_predictions = predictions

        except Exception as e:
            logger.error(f"Prediction cycle failed: {str(e)}")
            self.current_predictions = []
            return PredictionCycleResult(
                metrics=self.metrics.snapshot(),
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
            )

        processing_time_ms = (time.perf_counter() - start_time) * 1000
        metrics = self.metrics.snapshot()
        self._log_statistics(metrics, predictions, processing_time_ms)

        return PredictionCycleResult(
            context=context,
            patterns=patterns,
            predictions=predictions,
            metrics=metrics,
            processing_time_ms=processing_time_ms,
        )

    def compute(
        self,
        visits: List[VisitRecord],
        context: Optional[List[str]] = None,
        config: Optional[PredictorConfig] = None,
        now: Optional[int] = None,
    ) -> PredictionCycleResult:
        """Mine and predict over a caller-supplied snapshot without touching session state"""
        config = config or self.config
        visits = [visit for visit in visits if visit.is_well_formed]

        patterns = self.miner.mine(visits, now=now)
        if context is None:
            context = get_current_context(visits, config.context_size)
        predictions = self._attach_pages(self.predictor.predict(context, patterns, config), visits)

        metrics = MetricsStore()
        metrics.record_mining(patterns, config.min_pattern_occurrences)
        metrics.record_predictions(predictions)

        return PredictionCycleResult(
            context=list(context),
            patterns=patterns,
            predictions=predictions,
            metrics=metrics.snapshot(),
        )

    def record_feedback(self, feedback: PredictionFeedback) -> PredictionMetrics:
        """Apply an outcome reported by the presentation layer"""
        if feedback.action == "shown":
            self.metrics.record_shown()
        elif feedback.action == "clicked":
            self.metrics.record_click()
            logger.info(f"User clicked prediction for {feedback.domain}")
        elif feedback.action == "visited":
            hit = self.metrics.record_visit(feedback.domain, self.current_predictions)
            logger.debug(f"Visit to {feedback.domain} {'matched' if hit else 'missed'} live predictions")
        return self.metrics.snapshot()

    def disable(self) -> None:
        """Drop the cached predictions"""
        logger.info("Clearing current tab predictions")
        self.current_predictions = []

    def reset_metrics(self) -> PredictionMetrics:
        return self.metrics.reset()

    async def _load_history(self, now: Optional[int]) -> List[VisitRecord]:
        db = self.session_factory()
        try:
            history_service = HistoryService(db)
            return await history_service.fetch_recent_visits(
                lookback_days=self.config.history_lookback_days,
                max_visits=self.config.history_max_visits,
                now=now,
            )
        finally:
            db.close()

    @staticmethod
    def _attach_pages(predictions: List[TabPrediction], history: List[VisitRecord]) -> List[TabPrediction]:
        """Use the latest observed URL and title for each predicted domain"""
        latest: Dict[str, VisitRecord] = {}
        for visit in history:
            latest[visit.domain] = visit

        enriched = []
        for prediction in predictions:
            visit = latest.get(prediction.domain)
            if visit is None:
                enriched.append(prediction)
                continue
            enriched.append(
                prediction.model_copy(
                    update={"url": visit.url or prediction.url, "title": visit.title or prediction.title}
                )
            )
        return enriched

    @staticmethod
    def _log_statistics(metrics: PredictionMetrics, predictions: List[TabPrediction], processing_time_ms: float):
        if predictions:
            logger.info(f"Generated {len(predictions)} predictions:")
            for idx, prediction in enumerate(predictions):
                logger.info(f"   {idx + 1}. {prediction.domain} ({round(prediction.confidence * 100)}% confidence)")
        else:
            logger.info("No predictions with sufficient confidence")

        logger.info(
            f"Prediction cycle complete: patterns={metrics.patterns_detected} "
            f"sequences={metrics.sequences_learned} generated={metrics.predictions_generated} "
            f"avg_confidence={round(metrics.avg_confidence * 100)}% shown={metrics.predictions_shown} "
            f"time={round(processing_time_ms)}ms"
        )
