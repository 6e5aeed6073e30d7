from typing import Dict, List, Optional, Sequence, Tuple
from loguru import logger

from tab_predictor.schemas.patterns import BrowsingPattern, MIN_SEQUENCE_LENGTH, MAX_SEQUENCE_LENGTH
from tab_predictor.schemas.visits import VisitRecord
from tab_predictor.services.utils import now_ms


class PatternMiner:
    """Mines recurring runs of consecutive domains from an ordered visit log"""

    def __init__(self, min_length: int = MIN_SEQUENCE_LENGTH, max_length: int = MAX_SEQUENCE_LENGTH):
        self.min_length = max(MIN_SEQUENCE_LENGTH, min_length)
        self.max_length = min(MAX_SEQUENCE_LENGTH, max_length)

    def mine(self, visits: Sequence[VisitRecord], now: Optional[int] = None) -> List[BrowsingPattern]:
        """
        Detect browsing patterns in a chronologically ordered visit log

        Every window of 2 to 5 consecutive visits is an occurrence of the
        pattern formed by its domains. Windows overlap, so one visit can take
        part in several patterns at once.

        Args:
            visits: Visit records in chronological order
            now: Reference time in milliseconds for recency scoring

        Returns:
            Patterns sorted by confidence, then frequency, then first appearance
        """
        clean_visits = self._drop_malformed(visits)
        if len(clean_visits) < self.min_length:
            return []

        reference_time = now if now is not None else now_ms()
        domains = [visit.domain for visit in clean_visits]
        pattern_map: Dict[Tuple[str, ...], BrowsingPattern] = {}

        for length in range(self.min_length, self.max_length + 1):
            for start in range(len(clean_visits) - length + 1):
                end = start + length
                key = tuple(domains[start:end])
                visit_time = clean_visits[end - 1].visit_time

                pattern = pattern_map.get(key)
                if pattern is None:
                    pattern = BrowsingPattern(sequence=key, frequency=1, last_seen=visit_time)
                    pattern_map[key] = pattern
                else:
                    pattern.record_occurrence(visit_time, reference_time)

                if end < len(clean_visits):
                    pattern.record_continuation(domains[end])

        for pattern in pattern_map.values():
            pattern.refresh_confidence(reference_time)

        # sorted() is stable, so ties keep first-appearance order
        patterns = sorted(pattern_map.values(), key=lambda p: (-p.confidence, -p.frequency))

        logger.info(f"Detected {len(patterns)} patterns from {len(clean_visits)} visits")
        return patterns

    def _drop_malformed(self, visits: Sequence[VisitRecord]) -> List[VisitRecord]:
        """Skip visits without a usable domain"""
        clean = [visit for visit in visits if visit.domain]
        if len(clean) != len(visits):
            logger.debug(f"Skipped {len(visits) - len(clean)} visits without a domain")
        return clean


def detect_browsing_patterns(visits: Sequence[VisitRecord], now: Optional[int] = None) -> List[BrowsingPattern]:
    """Mine patterns with the default 2..5 window lengths"""
    return PatternMiner().mine(visits, now=now)
