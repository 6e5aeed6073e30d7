from typing import Dict, Iterable, List, Optional, Sequence
from loguru import logger

from tab_predictor.schemas.patterns import BrowsingPattern
from tab_predictor.schemas.predictions import PredictorConfig, TabPrediction, PRELOAD_CONFIDENCE


class Predictor:
    """Turns mined patterns into ranked next-visit predictions for a browsing context"""

    def __init__(self, config: Optional[PredictorConfig] = None):
        self.config = config or PredictorConfig()

    def predict(
        self,
        context: Optional[Sequence[str]],
        patterns: Optional[Iterable[BrowsingPattern]],
        config: Optional[PredictorConfig] = None,
    ) -> List[TabPrediction]:
        """
        Predict the next domains for the given context

        Args:
            context: Most recent domains, oldest first
            patterns: Mined patterns, typically in the miner's ranking order
            config: Overrides the predictor's own config for this call

        Returns:
            At most max_predictions_shown predictions, one per domain, by confidence
        """
        config = config or self.config
        if not context or not patterns:
            return []

        context = list(context)
        best: Dict[str, TabPrediction] = {}
        contributors: Dict[str, List[str]] = {}

        for pattern in patterns:
            if pattern.frequency < config.min_pattern_occurrences:
                continue
            if not pattern.next_domains or not self._matches_context(context, pattern):
                continue

            for domain, count in pattern.next_domains.items():
                confidence = (count / pattern.frequency) * pattern.confidence
                if confidence < config.min_confidence_threshold:
                    continue

                signatures = contributors.setdefault(domain, [])
                if pattern.signature not in signatures:
                    signatures.append(pattern.signature)

                existing = best.get(domain)
                if existing is None or confidence > existing.confidence:
                    best[domain] = self._build_prediction(domain, confidence, pattern)

        predictions = []
        for domain, prediction in best.items():
            winner = prediction.patterns[0]
            others = [signature for signature in contributors[domain] if signature != winner]
            predictions.append(prediction.model_copy(update={"patterns": [winner] + others}))

        # Stable sort keeps first-seen order among equal confidences
        predictions.sort(key=lambda p: -p.confidence)
        predictions = predictions[: config.max_predictions_shown]

        for prediction in predictions:
            logger.debug(f"Predicted {prediction.domain} ({round(prediction.confidence * 100)}% confidence)")

        return predictions

    @staticmethod
    def _matches_context(context: List[str], pattern: BrowsingPattern) -> bool:
        """Check if the trailing context lines up with the end of the pattern

        The last min(len(context), len(sequence)) domains of both must be equal,
        so the pattern's continuations are what could follow the context.
        """
        overlap = min(len(context), len(pattern.sequence))
        if overlap == 0:
            return False
        return tuple(context[-overlap:]) == tuple(pattern.sequence[-overlap:])

    @staticmethod
    def _build_prediction(domain: str, confidence: float, pattern: BrowsingPattern) -> TabPrediction:
        return TabPrediction(
            domain=domain,
            url=f"https://{domain}",
            title=f"Visit {domain}",
            confidence=confidence,
            reason="sequential",
            suggested_action="preload" if confidence > PRELOAD_CONFIDENCE else "open",
            patterns=[pattern.signature],
        )


def generate_predictions(
    context: Optional[Sequence[str]],
    patterns: Optional[Iterable[BrowsingPattern]],
    config: Optional[PredictorConfig] = None,
) -> List[TabPrediction]:
    """Predict with the given config, or the defaults"""
    return Predictor(config).predict(context, patterns)
