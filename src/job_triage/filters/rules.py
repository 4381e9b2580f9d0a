"""
Job filters.

Static filters encode hard disqualifiers (onsite work, mandatory CS degree,
AWS-dominated postings for Azure searches). Learned filters are built from
recurring rejection patterns. Every filter is a pure predicate over a
JobPosting and an optional search profile.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import FrozenSet, Iterable, List, Optional, Pattern, Sequence

from job_triage.filters.models import FilterVerdict, JobPosting
from job_triage.profiles import AZURE_FAVORING_PROFILES, SearchProfile

logger = logging.getLogger(__name__)


def _compile(patterns: Iterable[str]) -> List[Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def _first_match(patterns: Sequence[Pattern[str]], text: str) -> Optional[str]:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


class JobFilter(ABC):
    """Base class for all job filters."""

    filter_type: str = "Job"

    @abstractmethod
    def evaluate(self, job: JobPosting, profile: Optional[SearchProfile] = None) -> FilterVerdict:
        """
        Evaluate a job against this filter.

        Args:
            job: Job posting to check
            profile: Resolved search profile, or None when unknown

        Returns:
            FilterVerdict (blocked with reason, or allowed)
        """

    def _block(self, reason: str) -> FilterVerdict:
        return FilterVerdict.block(reason=reason, filter_type=self.filter_type)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class LocationRequirementFilter(JobFilter):
    """
    Block jobs requiring onsite presence, hybrid schedules, relocation or local residence.

    Explicit requirements ("3 days a week in office", "must relocate") always block.
    A bare "hybrid" mention blocks unless the posting is also clearly fully remote.
    """

    filter_type = "LocationRequirement"

    EXPLICIT_PATTERNS = _compile(
        [
            r"\b\d+\s*(?:-\s*\d+\s*)?days?\s*(?:a|per|/|each)\s*week\s*(?:in|at)\s*(?:the\s*|our\s*)?office",
            r"\b\d+\s*(?:-\s*\d+\s*)?days?\s*(?:a\s+week\s+)?(?:in|at)\s*(?:the\s*|our\s*)?office",
            r"\b\d+\s*x\s*(?:a|per|/|each)\s*week",
            r"\b(?:100\s*%|fully|full[- ]time)\s*(?:on[- ]?site|in[- ]office)",
            r"\bmust\s+(?:be\s+)?(?:work(?:ing)?\s+)?(?:on[- ]?site|in[- ]office|in\s+the\s+office)",
            r"\b(?:on[- ]?site|in[- ]office)\s+(?:only|required|position|role)",
            r"\bmust\s+(?:be\s+(?:willing|able)\s+to\s+)?relocate",
            r"\brelocation\s+(?:is\s+)?required",
            r"\bmust\s+(?:be\s+)?(?:local|located|live|reside)\s+(?:to|in|near|within)",
            r"\blocal\s+candidates\s+only",
        ]
    )
    # "hybrid cloud" and similar describe technology, not a work schedule
    SOFT_PATTERNS = _compile(
        [
            r"\bhybrid\b(?![\s-]+(?:cloud|apps?|mobile|identity|infrastructure|"
            r"integrations?|architectures?|environments?|solutions?)\b)"
        ]
    )
    REMOTE_PATTERNS = _compile(
        [
            r"\bfully\s+remote\b",
            r"\b100\s*%\s*remote\b",
            r"\bremote,?\s+work\s+from\s+anywhere\b",
            r"\bwork\s+from\s+anywhere\b",
        ]
    )

    def evaluate(self, job: JobPosting, profile: Optional[SearchProfile] = None) -> FilterVerdict:
        description = job.description or ""
        if not description.strip():
            return FilterVerdict.allow()

        explicit = _first_match(self.EXPLICIT_PATTERNS, description)
        if explicit:
            return self._block(f"Job requires onsite or hybrid work ('{explicit.strip()}')")

        soft = _first_match(self.SOFT_PATTERNS, description)
        if soft and not _first_match(self.REMOTE_PATTERNS, description):
            return self._block(f"Job requires onsite or hybrid work ('{soft.strip()}')")

        return FilterVerdict.allow()


class EducationRequirementFilter(JobFilter):
    """
    Block jobs that make a Computer Science degree mandatory.

    Works clause by clause: a clause needs both a CS mention and a degree token,
    and must not soften the requirement ("preferred", "or equivalent"). A clause
    that directly follows and opens with softening language also counts, as in
    "CS degree, or equivalent experience".
    """

    filter_type = "EducationRequirement"

    CS_PATTERN = re.compile(r"computer\s+science|\bcs\b", re.IGNORECASE)
    DEGREE_PATTERN = re.compile(r"bachelor|\bbs\b|\bbsc\b|\bdegree\b", re.IGNORECASE)
    SOFT_PATTERN = re.compile(
        r"prefer|nice\s+to\s+have|\bplus\b|equivalent|\bbonus\b|desired|ideally|not\s+required",
        re.IGNORECASE,
    )
    # "B.S." / "B.Sc." would otherwise split sentences
    ABBREVIATIONS = re.compile(r"\bb\.\s?sc?\.", re.IGNORECASE)
    SENTENCE_SPLIT = re.compile(r"(?<=[.!?;])\s+|\n+")
    CLAUSE_SPLIT = re.compile(r"\s*[,;]\s*|\s+(?:and|plus|but|while)\s+", re.IGNORECASE)
    LEADING_SOFT = re.compile(
        r"^(?:or\s+)?(?:an?\s+)?(?:equivalent|prefer|ideally|desired|nice\s+to\s+have|"
        r"not\s+required|is\s+a\s+(?:plus|bonus))",
        re.IGNORECASE,
    )

    def _clauses(self, description: str) -> List[str]:
        normalized = self.ABBREVIATIONS.sub("BS ", description)
        clauses = []
        for sentence in self.SENTENCE_SPLIT.split(normalized):
            clauses.extend(c for c in self.CLAUSE_SPLIT.split(sentence) if c.strip())
        return clauses

    def evaluate(self, job: JobPosting, profile: Optional[SearchProfile] = None) -> FilterVerdict:
        description = job.description or ""
        if not description.strip():
            return FilterVerdict.allow()

        clauses = self._clauses(description)
        for index, clause in enumerate(clauses):
            if not (self.CS_PATTERN.search(clause) and self.DEGREE_PATTERN.search(clause)):
                continue
            if self.SOFT_PATTERN.search(clause):
                continue
            following = clauses[index + 1] if index + 1 < len(clauses) else ""
            if self.LEADING_SOFT.match(following.strip()):
                continue
            return self._block("Job requires a Computer Science degree")

        return FilterVerdict.allow()


class CloudProviderBiasFilter(JobFilter):
    """
    Block postings dominated by a disfavored cloud provider.

    Only active for the configured profiles; inert for any other or unknown profile.
    A posting is dominated when the disfavored brand is mentioned more often than
    the favored one (at least ``min_mentions`` times), or when the title names the
    disfavored provider and the favored one is never mentioned.
    """

    filter_type = "CloudProviderBias"

    def __init__(
        self,
        active_profiles: Iterable[SearchProfile] = AZURE_FAVORING_PROFILES,
        favored: str = "Azure",
        disfavored: str = "AWS",
        favored_patterns: Sequence[str] = (r"\bazure\b",),
        disfavored_patterns: Sequence[str] = (r"\baws\b", r"\bamazon\s+web\s+services\b"),
        min_mentions: int = 2,
    ):
        """
        Initialize cloud bias filter.

        Args:
            active_profiles: Profiles this filter applies to
            favored: Display name of the favored provider
            disfavored: Display name of the disfavored provider
            favored_patterns: Regexes counting favored-provider mentions
            disfavored_patterns: Regexes counting disfavored-provider mentions
            min_mentions: Minimum disfavored mentions for the dominance rule
        """
        self.active_profiles: FrozenSet[SearchProfile] = frozenset(active_profiles)
        self.favored = favored
        self.disfavored = disfavored
        self.favored_patterns = _compile(favored_patterns)
        self.disfavored_patterns = _compile(disfavored_patterns)
        self.min_mentions = min_mentions

    @staticmethod
    def _count(patterns: Sequence[Pattern[str]], text: str) -> int:
        return sum(len(pattern.findall(text)) for pattern in patterns)

    def evaluate(self, job: JobPosting, profile: Optional[SearchProfile] = None) -> FilterVerdict:
        if profile is None or profile not in self.active_profiles:
            return FilterVerdict.allow()

        title = job.title or ""
        text = f"{title} {job.description or ''}"
        disfavored_count = self._count(self.disfavored_patterns, text)
        favored_count = self._count(self.favored_patterns, text)

        if disfavored_count == 0:
            return FilterVerdict.allow()

        title_names_disfavored = self._count(self.disfavored_patterns, title) > 0
        dominated = disfavored_count > favored_count and disfavored_count >= self.min_mentions

        if dominated or (title_names_disfavored and favored_count == 0):
            return self._block(
                f"Job is {self.disfavored}-focused ({disfavored_count} {self.disfavored} vs "
                f"{favored_count} {self.favored} mentions); profile '{profile.value}' "
                f"favors {self.favored}"
            )

        return FilterVerdict.allow()

    def __repr__(self) -> str:
        profiles = sorted(p.value for p in self.active_profiles)
        return f"CloudProviderBiasFilter(disfavored={self.disfavored!r}, profiles={profiles})"


class CompanyBlocklistFilter(JobFilter):
    """Block companies the user keeps rejecting."""

    filter_type = "CompanyBlocklist"

    def __init__(self, companies: Iterable[str]):
        self.companies = {c.strip().lower() for c in companies if c.strip()}

    def evaluate(self, job: JobPosting, profile: Optional[SearchProfile] = None) -> FilterVerdict:
        company = (job.company or "").strip().lower()
        if company and company in self.companies:
            return self._block(
                f"Company is on blocklist due to previous rejections ({job.company})"
            )
        return FilterVerdict.allow()

    def __repr__(self) -> str:
        return f"CompanyBlocklistFilter({sorted(self.companies)})"


class _TermFilter(JobFilter):
    """Shared word-boundary term matching over title and description."""

    reason_prefix = ""

    def __init__(self, terms: Iterable[str]):
        self.terms = sorted({t.strip().lower() for t in terms if t.strip()})
        # Word boundaries avoid false matches (e.g. "Java" in "JavaScript")
        self.patterns = [
            (term, re.compile(r"(?<!\w)" + re.escape(term) + r"(?!\w)", re.IGNORECASE))
            for term in self.terms
        ]

    def evaluate(self, job: JobPosting, profile: Optional[SearchProfile] = None) -> FilterVerdict:
        text = job.searchable_text
        for term, pattern in self.patterns:
            if pattern.search(text):
                return self._block(f"{self.reason_prefix} ('{term}')")
        return FilterVerdict.allow()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.terms})"


class KeywordAvoidanceFilter(_TermFilter):
    """Block jobs mentioning keywords tied to previous rejections."""

    filter_type = "KeywordAvoidance"
    reason_prefix = "Job contains keywords associated with previous rejections"


class TechStackFilter(_TermFilter):
    """Block jobs requiring technologies tied to previous rejections."""

    filter_type = "TechStack"
    reason_prefix = "Job requires technology stack associated with previous rejections"


class SeniorityMinimumFilter(JobFilter):
    """Block titles below a minimum seniority level."""

    filter_type = "SeniorityMinimum"

    BELOW_LEVEL = {
        "senior": ("junior", "jr", "entry", "associate", "intern", "internship"),
        "mid": ("entry", "associate", "intern", "internship"),
    }

    def __init__(self, min_seniority: str):
        self.min_seniority = min_seniority.lower()
        # Same boundaries as the term filters, so "Internal" is not "intern"
        self.patterns = [
            re.compile(r"(?<!\w)" + re.escape(marker) + r"(?!\w)", re.IGNORECASE)
            for marker in self.BELOW_LEVEL.get(self.min_seniority, ())
        ]

    def evaluate(self, job: JobPosting, profile: Optional[SearchProfile] = None) -> FilterVerdict:
        title = job.title or ""
        for pattern in self.patterns:
            if pattern.search(title):
                return self._block(
                    f"Job does not meet minimum seniority requirement ({self.min_seniority})"
                )
        return FilterVerdict.allow()

    def __repr__(self) -> str:
        return f"SeniorityMinimumFilter({self.min_seniority!r})"
