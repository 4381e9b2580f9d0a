"""Job filtering system."""

from job_triage.filters.chain import (
    FilterChain,
    apply_filters,
    build_pattern_filters,
    count_pattern_filter_sources,
    is_junior_signal,
)
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

__all__ = [
    "FilterChain",
    "FilterVerdict",
    "JobPosting",
    "JobFilter",
    "LocationRequirementFilter",
    "EducationRequirementFilter",
    "CloudProviderBiasFilter",
    "CompanyBlocklistFilter",
    "KeywordAvoidanceFilter",
    "SeniorityMinimumFilter",
    "TechStackFilter",
    "apply_filters",
    "build_pattern_filters",
    "count_pattern_filter_sources",
    "is_junior_signal",
]
