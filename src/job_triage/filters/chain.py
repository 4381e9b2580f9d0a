"""
Filter chain evaluation.

Filters run in a fixed priority order and the chain stops at the first block.
The static chain is pure; learned filters are built from a snapshot of
rejection patterns so the chain itself never touches storage.
"""

import logging
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

from job_triage.filters.models import FilterVerdict, JobPosting
from job_triage.filters.rules import (
    CloudProviderBiasFilter,
    CompanyBlocklistFilter,
    EducationRequirementFilter,
    JobFilter,
    KeywordAvoidanceFilter,
    LocationRequirementFilter,
    SeniorityMinimumFilter,
    TechStackFilter,
)
from job_triage.profiles import SearchProfile, resolve_profile

logger = logging.getLogger(__name__)

DEFAULT_PATTERN_THRESHOLD = 2

# Seniority pattern values meaning "the job was too junior for me"
JUNIOR_MARKERS = (
    "junior",
    "not senior",
    "entry level",
    "mid level",
    "not enough experience",
    "more experience",
    "lack experience",
)

PATTERN_FILTER_TYPES = {
    "company": CompanyBlocklistFilter.filter_type,
    "keyword": KeywordAvoidanceFilter.filter_type,
    "seniority": SeniorityMinimumFilter.filter_type,
    "tech_stack": TechStackFilter.filter_type,
}


class FilterChain:
    """
    Ordered, short-circuiting list of job filters.

    Example:
        ```python
        chain = FilterChain.default()
        verdict = chain.evaluate(JobPosting(title="...", description="Hybrid role"), "core")
        verdict.blocked  # True
        ```
    """

    def __init__(self, filters: Sequence[JobFilter]):
        """
        Initialize filter chain.

        Args:
            filters: Filters in priority order (first block wins)
        """
        self.filters: List[JobFilter] = list(filters)

    @classmethod
    def default(cls) -> "FilterChain":
        """Static chain: location, education, cloud provider bias."""
        return cls(
            [
                LocationRequirementFilter(),
                EducationRequirementFilter(),
                CloudProviderBiasFilter(),
            ]
        )

    def extended(self, filters: Iterable[JobFilter]) -> "FilterChain":
        """Return a new chain with extra filters appended after these."""
        return FilterChain(self.filters + list(filters))

    def evaluate(
        self,
        job: Union[JobPosting, Dict[str, Any]],
        profile: Union[str, SearchProfile, None] = None,
    ) -> FilterVerdict:
        """
        Evaluate a job against every filter until one blocks.

        Args:
            job: JobPosting (or job dict)
            profile: Search profile tag; falls back to ``job.profile`` when omitted

        Returns:
            Verdict of the first blocking filter, or an allowed verdict
        """
        if isinstance(job, dict):
            job = JobPosting.from_dict(job)

        resolved = resolve_profile(profile if profile is not None else job.profile)

        for job_filter in self.filters:
            verdict = job_filter.evaluate(job, resolved)
            if verdict.blocked:
                logger.debug(f"Job filtered: {job.title} at {job.company} - {verdict.reason}")
                return verdict

        return FilterVerdict.allow()

    def test_filters(
        self,
        jobs: Iterable[Union[JobPosting, Dict[str, Any]]],
        profile: Union[str, SearchProfile, None] = None,
    ) -> List[Dict[str, Any]]:
        """
        Run the chain over sample jobs.

        Returns:
            List of {"job", "blocked", "reason"} dicts, one per job
        """
        results = []
        for job in jobs:
            verdict = self.evaluate(job, profile)
            results.append({"job": job, "blocked": verdict.blocked, "reason": verdict.reason})
        return results

    def __len__(self) -> int:
        return len(self.filters)

    def __repr__(self) -> str:
        return f"FilterChain({self.filters!r})"


_DEFAULT_CHAIN = FilterChain.default()


def apply_filters(
    job: Union[JobPosting, Dict[str, Any]], profile: Union[str, SearchProfile, None] = None
) -> FilterVerdict:
    """
    Evaluate a job against the static filter chain.

    Args:
        job: JobPosting or job dict with title/company/description
        profile: Optional search profile tag (e.g. "core", "legacy-web")

    Returns:
        FilterVerdict from the first blocking filter, or allowed
    """
    return _DEFAULT_CHAIN.evaluate(job, profile)


def is_junior_signal(value: str) -> bool:
    """True when a seniority pattern value means the job was too junior."""
    value = value.lower()
    return any(marker in value for marker in JUNIOR_MARKERS)


def _active_pattern_groups(
    patterns: Iterable[Any], threshold: int
) -> Tuple[Dict[str, List[Any]], int]:
    """Split patterns into active company/keyword/tech_stack groups plus the junior total."""
    groups: Dict[str, List[Any]] = {"company": [], "keyword": [], "tech_stack": []}
    junior_count = 0

    for pattern in patterns:
        if pattern.type == "seniority":
            if is_junior_signal(pattern.value):
                junior_count += pattern.count
        elif pattern.type in groups and pattern.count >= threshold:
            groups[pattern.type].append(pattern)

    return groups, junior_count


def build_pattern_filters(
    patterns: Iterable[Any], threshold: int = DEFAULT_PATTERN_THRESHOLD
) -> List[JobFilter]:
    """
    Build learned filters from rejection patterns.

    Only patterns seen at least ``threshold`` times become filters. Seniority
    patterns are combined: ``threshold`` or more "too junior" observations in
    total activate a senior minimum.

    Args:
        patterns: RejectionPattern-like objects with ``type``, ``value``, ``count``
        threshold: Minimum occurrences before a pattern becomes a filter

    Returns:
        Filters in order: company, keyword, seniority, tech stack
    """
    groups, junior_count = _active_pattern_groups(patterns, threshold)

    filters: List[JobFilter] = []
    if groups["company"]:
        filters.append(CompanyBlocklistFilter(p.value for p in groups["company"]))
    if groups["keyword"]:
        filters.append(KeywordAvoidanceFilter(p.value for p in groups["keyword"]))
    if junior_count >= threshold:
        filters.append(SeniorityMinimumFilter("senior"))
    if groups["tech_stack"]:
        filters.append(TechStackFilter(p.value for p in groups["tech_stack"]))

    return filters


def count_pattern_filter_sources(
    patterns: Iterable[Any], threshold: int = DEFAULT_PATTERN_THRESHOLD
) -> Dict[str, int]:
    """
    Sum the pattern counts behind each active learned filter.

    Returns:
        {filter_type: total count}, only for filter types that are active
    """
    groups, junior_count = _active_pattern_groups(patterns, threshold)

    counts = {
        PATTERN_FILTER_TYPES[pattern_type]: sum(p.count for p in active)
        for pattern_type, active in groups.items()
        if active
    }
    if junior_count >= threshold:
        counts[PATTERN_FILTER_TYPES["seniority"]] = junior_count
    return counts
