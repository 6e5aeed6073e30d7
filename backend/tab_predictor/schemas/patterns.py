import math
from typing import Dict, List, Tuple
from pydantic import BaseModel, Field

MIN_SEQUENCE_LENGTH = 2
MAX_SEQUENCE_LENGTH = 5

RECENCY_DECAY_MS = 1000 * 60 * 60 * 24 * 7  # 7 days
FREQUENCY_SATURATION = 10
RECENCY_WEIGHT = 0.6
FREQUENCY_WEIGHT = 0.4

SIGNATURE_SEPARATOR = " -> "


def pattern_confidence(frequency: int, last_seen: int, now: int) -> float:
    """Time-decayed, frequency-weighted trust score in [0, 1]"""
    # Future timestamps (clock skew) count as seen just now
    age_ms = max(0, now - last_seen)
    recency_score = math.exp(-age_ms / RECENCY_DECAY_MS)
    frequency_score = min(1.0, frequency / FREQUENCY_SATURATION)
    return RECENCY_WEIGHT * recency_score + FREQUENCY_WEIGHT * frequency_score


class BrowsingPattern(BaseModel):
    """A recurring run of consecutive domains"""

    sequence: Tuple[str, ...] = Field(
        ...,
        min_length=MIN_SEQUENCE_LENGTH,
        max_length=MAX_SEQUENCE_LENGTH,
        description="Ordered domains forming the pattern",
    )
    frequency: int = Field(1, ge=1, description="Number of observed occurrences")
    last_seen: int = Field(..., description="Timestamp of the most recent occurrence in milliseconds")
    confidence: float = Field(0.0, ge=0.0, le=1.0, description="Time-decayed trust score")
    next_domains: Dict[str, int] = Field(
        default_factory=dict, description="Continuation domain -> times it followed this pattern"
    )

    @property
    def signature(self) -> str:
        """Human-readable pattern signature"""
        return SIGNATURE_SEPARATOR.join(self.sequence)

    @property
    def length(self) -> int:
        return len(self.sequence)

    @property
    def continuation_count(self) -> int:
        """Total number of recorded continuations"""
        return sum(self.next_domains.values())

    def record_occurrence(self, visit_time: int, now: int) -> None:
        """Count another occurrence ending at visit_time and rescore against now"""
        self.frequency += 1
        self.last_seen = max(self.last_seen, visit_time)
        self.refresh_confidence(now)

    def record_continuation(self, domain: str) -> None:
        """Count a domain that immediately followed this pattern"""
        self.next_domains[domain] = self.next_domains.get(domain, 0) + 1

    def refresh_confidence(self, now: int) -> float:
        self.confidence = pattern_confidence(self.frequency, self.last_seen, now)
        return self.confidence


class PatternListResponse(BaseModel):
    """Response schema for the latest mined patterns"""

    patterns: List[BrowsingPattern] = Field(..., description="Patterns sorted by confidence")
    total: int = Field(..., description="Number of patterns returned")
