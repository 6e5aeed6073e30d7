"""Tests for sliding-window pattern mining"""

import math

import pytest

from tab_predictor.schemas.patterns import BrowsingPattern, pattern_confidence
from tab_predictor.schemas.visits import VisitRecord
from tab_predictor.services.pattern_miner import PatternMiner, detect_browsing_patterns

from conftest import NOW, MINUTE, DAY

A, B, C = "a.com", "b.com", "c.com"


def _by_sequence(patterns):
    return {p.sequence: p for p in patterns}


def test_empty_log_yields_no_patterns():
    assert PatternMiner().mine([], now=NOW) == []


def test_single_visit_yields_no_patterns(make_visits):
    assert PatternMiner().mine(make_visits([A]), now=NOW) == []


def test_alternating_log_counts_frequencies_and_continuations(make_visits):
    patterns = _by_sequence(PatternMiner().mine(make_visits([A, B, A, B, A, C]), now=NOW))

    assert patterns[(A, B)].frequency == 2
    assert patterns[(A, B)].next_domains == {A: 2}
    assert patterns[(B, A)].frequency == 2
    assert patterns[(B, A)].next_domains == {B: 1, C: 1}
    assert patterns[(A, C)].frequency == 1
    assert patterns[(A, C)].next_domains == {}
    assert patterns[(A, B, A)].next_domains == {B: 1, C: 1}
    assert len(patterns) == 11


def test_sequence_lengths_stay_between_two_and_five(make_visits):
    patterns = PatternMiner().mine(make_visits([A, B, C, A, B, C, A, B, C]), now=NOW)

    assert patterns
    assert {p.length for p in patterns} == {2, 3, 4, 5}


def test_last_seen_is_latest_occurrence_end(make_visits):
    visits = make_visits([A, B, C, A, B])
    patterns = _by_sequence(PatternMiner().mine(visits, now=NOW))

    assert patterns[(A, B)].last_seen == visits[4].visit_time
    assert patterns[(B, C)].last_seen == visits[2].visit_time


def test_confidence_for_fresh_pattern():
    # seen just now, twice: 0.6 * 1 + 0.4 * 0.2
    assert pattern_confidence(2, NOW, NOW) == pytest.approx(0.68)


def test_confidence_decays_over_a_week():
    expected = 0.6 * math.exp(-1) + 0.4
    assert pattern_confidence(10, NOW - 7 * DAY, NOW) == pytest.approx(expected)


def test_frequency_score_saturates_at_ten():
    assert pattern_confidence(50, NOW, NOW) == pytest.approx(1.0)
    assert pattern_confidence(50, NOW, NOW) <= 1.0


def test_future_last_seen_does_not_exceed_one():
    assert pattern_confidence(10, NOW + DAY, NOW) <= 1.0


def test_patterns_sorted_by_confidence_then_frequency(make_visits):
    patterns = PatternMiner().mine(make_visits([A, B, C, A, B, C, A, B]), now=NOW)

    keys = [(-p.confidence, -p.frequency) for p in patterns]
    assert keys == sorted(keys)


def test_recent_pattern_outranks_frequent_old_one():
    old = [VisitRecord(url="", domain=d, visit_time=NOW - 60 * DAY + i) for i, d in enumerate([A, B] * 10)]
    recent = [
        VisitRecord(url="", domain="x.com", visit_time=NOW - 2 * MINUTE),
        VisitRecord(url="", domain="y.com", visit_time=NOW - MINUTE),
        VisitRecord(url="", domain="x.com", visit_time=NOW - 30_000),
        VisitRecord(url="", domain="y.com", visit_time=NOW),
    ]
    patterns = PatternMiner().mine(old + recent, now=NOW)
    ranked = [p.sequence for p in patterns]

    assert ranked.index(("x.com", "y.com")) < ranked.index((A, B))


def test_malformed_visits_are_skipped(make_visits):
    visits = make_visits([A, B])
    visits.insert(1, VisitRecord(url="", title="broken", visit_time=NOW - 30_000))

    patterns = _by_sequence(PatternMiner().mine(visits, now=NOW))

    assert list(patterns) == [(A, B)]


def test_domain_spellings_share_one_pattern():
    visits = [
        VisitRecord(url="", domain="www.a.com", visit_time=NOW - 3 * MINUTE),
        VisitRecord(url="", domain="b.com", visit_time=NOW - 2 * MINUTE),
        VisitRecord(url="https://A.com/", visit_time=NOW - MINUTE),
        VisitRecord(url="", domain="B.COM", visit_time=NOW),
    ]

    patterns = _by_sequence(PatternMiner().mine(visits, now=NOW))

    assert patterns[(A, B)].frequency == 2
    assert patterns[(A, B)].next_domains == {A: 1}


def test_mining_is_deterministic(make_visits):
    visits = make_visits([A, B, C, B, A, C, A, B, C, C, A])

    first = [p.model_dump() for p in detect_browsing_patterns(visits, now=NOW)]
    second = [p.model_dump() for p in detect_browsing_patterns(visits, now=NOW)]

    assert first == second


def test_extra_occurrence_never_lowers_frequency_or_confidence(make_visits):
    visits = make_visits([A, B, C, A, B])
    before = _by_sequence(PatternMiner().mine(visits, now=NOW + MINUTE))[(A, B)]

    more = visits + [
        VisitRecord(url="", domain=C, visit_time=NOW + 30_000),
        VisitRecord(url="", domain=A, visit_time=NOW + 40_000),
        VisitRecord(url="", domain=B, visit_time=NOW + 50_000),
    ]
    after = _by_sequence(PatternMiner().mine(more, now=NOW + MINUTE))[(A, B)]

    assert after.frequency > before.frequency
    assert after.confidence >= before.confidence


def test_confidence_bounds_and_continuation_counts(make_visits):
    visits = make_visits([A, B, C, A, C, B, A, B, C, A, A, B])

    for pattern in PatternMiner().mine(visits, now=NOW):
        assert 0.0 <= pattern.confidence <= 1.0
        assert pattern.frequency >= 1
        assert all(count > 0 for count in pattern.next_domains.values())
        assert pattern.continuation_count <= pattern.frequency


def test_pattern_signature_and_updates():
    pattern = BrowsingPattern(sequence=(A, B), last_seen=NOW - DAY)
    pattern.record_occurrence(NOW - 2 * DAY, NOW)
    assert pattern.confidence == pytest.approx(pattern_confidence(2, NOW - DAY, NOW))

    pattern.record_continuation(C)
    pattern.record_continuation(C)

    assert pattern.signature == "a.com -> b.com"
    assert pattern.frequency == 2
    assert pattern.last_seen == NOW - DAY
    assert pattern.next_domains == {C: 2}
    assert pattern.refresh_confidence(NOW) == pattern.confidence > 0
