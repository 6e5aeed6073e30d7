"""Tests for domain helpers and visit records"""

from tab_predictor.schemas.visits import VisitRecord
from tab_predictor.services.utils import extract_domain, get_current_context, normalize_domain

from conftest import NOW


def test_extract_domain_strips_scheme_and_www():
    assert extract_domain("https://www.github.com/anthropics") == "github.com"
    assert extract_domain("http://developer.mozilla.org/en-US/") == "developer.mozilla.org"
    assert extract_domain("https://WWW.Example.COM:8443/path?q=1") == "example.com"


def test_extract_domain_falls_back_to_input():
    assert extract_domain("not a url") == "not a url"
    assert extract_domain("www.GitHub.com") == "github.com"
    assert extract_domain("") == ""
    assert extract_domain(None) == ""


def test_visit_record_derives_domain_from_url():
    visit = VisitRecord(url="https://www.stackoverflow.com/questions", title="SO", visit_time=NOW)

    assert visit.domain == "stackoverflow.com"
    assert visit.is_well_formed


def test_visit_record_keeps_supplied_domain():
    visit = VisitRecord(url="https://mail.google.com/", domain="gmail", visit_time=NOW)

    assert visit.domain == "gmail"


def test_normalize_domain_lowercases_and_strips_www():
    assert normalize_domain("  WWW.GitHub.com ") == "github.com"
    assert normalize_domain("docs.python.org") == "docs.python.org"
    assert normalize_domain(None) == ""


def test_visit_record_normalizes_supplied_domain():
    visit = VisitRecord(url="https://www.github.com/", domain="WWW.GitHub.com", visit_time=NOW)

    assert visit.domain == "github.com"


def test_visit_record_without_url_or_domain_is_malformed():
    assert not VisitRecord(url="", visit_time=NOW).is_well_formed


def test_current_context_uses_last_domains(make_visits):
    visits = make_visits(["a.com", "b.com", "c.com", "d.com"])

    assert get_current_context(visits) == ["b.com", "c.com", "d.com"]
    assert get_current_context(visits, 2) == ["c.com", "d.com"]
    assert get_current_context(visits, 10) == ["a.com", "b.com", "c.com", "d.com"]
    assert get_current_context(visits, 0) == []
    assert get_current_context([]) == []
