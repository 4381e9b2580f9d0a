"""
Rule-based label matching.

Rules are tried in order and the first match wins, so more specific rules
(first/last name, timezone) come before broader ones (full name, city).
"""

import re
from typing import List, Optional, Tuple

from job_triage.mapping.vocabulary import CanonicalKey, LabelMapping

HEURISTICS: List[Tuple[re.Pattern, CanonicalKey, float]] = [
    (re.compile(r"^first\s*name", re.I), CanonicalKey.FIRST_NAME, 0.99),
    (re.compile(r"^last\s*name", re.I), CanonicalKey.LAST_NAME, 0.99),
    (
        re.compile(
            r"full\s*name|legal\s*name|first\s*and\s*last|^(your\s+)?name\s*[:*?]?$|\byour\s+name\b",
            re.I,
        ),
        CanonicalKey.FULL_NAME,
        0.99,
    ),
    (re.compile(r"e-?mail", re.I), CanonicalKey.EMAIL, 0.99),
    (re.compile(r"phone|mobile|telephone", re.I), CanonicalKey.PHONE, 0.99),
    (re.compile(r"time\s*zone", re.I), CanonicalKey.US_TIMEZONE, 0.98),
    (
        re.compile(r"work\s*authori[sz]ation|authori[sz]ed\s*to\s*work|legal.*work", re.I),
        CanonicalKey.WORK_AUTHORIZATION,
        0.99,
    ),
    (
        re.compile(r"require.*sponsor|sponsorship|visa\s*sponsor", re.I),
        CanonicalKey.REQUIRES_SPONSORSHIP,
        0.99,
    ),
    (
        re.compile(
            r"(years?|experience).*(\.net|dotnet)\b|(\.net|dotnet)\b.*(years?|experience)", re.I
        ),
        CanonicalKey.YEARS_DOTNET,
        0.95,
    ),
    (
        re.compile(r"(years?|experience).*\bazure\b|\bazure\b.*(years?|experience)", re.I),
        CanonicalKey.YEARS_AZURE,
        0.95,
    ),
    (re.compile(r"linked\s*in", re.I), CanonicalKey.LINKEDIN_URL, 0.99),
    (
        re.compile(r"salary|compensation|(pay|rate)\s*expect|desired\s*(pay|rate)", re.I),
        CanonicalKey.SALARY_EXPECTATION,
        0.95,
    ),
    (
        re.compile(r"why.*fit|why.*interested|why.*apply|cover\s*letter", re.I),
        CanonicalKey.WHY_FIT,
        0.95,
    ),
    (re.compile(r"\bcity\b|location|where.*located", re.I), CanonicalKey.CITY, 0.98),
]


def match_heuristic(label: str) -> Optional[LabelMapping]:
    """
    Resolve a label with the rule table.

    Returns:
        LabelMapping with confidence >= 0.95, or None when no rule matches
    """
    text = (label or "").strip()
    if not text:
        return None

    for pattern, key, confidence in HEURISTICS:
        if pattern.search(text):
            return LabelMapping(label=label, key=key, confidence=confidence, source="heuristic")
    return None
