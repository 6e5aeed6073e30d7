import time
from typing import List, Sequence
from urllib.parse import urlparse

MS_PER_DAY = 1000 * 60 * 60 * 24


def now_ms() -> int:
    """Current time in milliseconds since epoch"""
    return int(time.time() * 1000)


def normalize_domain(host: str) -> str:
    """Lowercase a host and drop a leading www."""
    domain = (host or "").strip().lower()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def extract_domain(url: str) -> str:
    """Extract the normalized host from a URL, falling back to the raw input"""
    candidate = (url or "").strip()
    if not candidate:
        return ""

    try:
        hostname = urlparse(candidate).hostname
    except ValueError:
        hostname = None

    return normalize_domain(hostname or candidate)


def get_current_context(visits: Sequence, context_size: int = 3) -> List[str]:
    """Domains of the last context_size well-formed visits"""
    if context_size <= 0:
        return []
    domains = [visit.domain for visit in visits if visit.domain]
    return domains[-context_size:]
