"""
Search profiles and scoring-category weights.

A search profile identifies which tech-stack search produced a job posting.
Profiles are a closed set; filters that only make sense for some profiles
declare an explicit allow-list here so the profile/filter matrix stays auditable.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional, Union


class SearchProfile(str, Enum):
    """
    Known search profiles.

    Values match the profile tags attached to scraped jobs (e.g. "core", "legacy-web").
    """

    CORE = "core"
    SECURITY = "security"
    EVENT_DRIVEN = "event-driven"
    PERFORMANCE = "performance"
    DEVOPS = "devops"
    BACKEND = "backend"
    CORE_NET = "core-net"
    LEGACY_MODERNIZATION = "legacy-modernization"
    CONTRACT = "contract"
    ASPNET_SIMPLE = "aspnet-simple"
    CSHARP_AZURE_NO_FRONTEND = "csharp-azure-no-frontend"
    AZ204_CSHARP = "az204-csharp"
    AI_ENHANCED_NET = "ai-enhanced-net"
    LEGACY_WEB = "legacy-web"


# Profiles whose searches target Azure; AWS-dominated postings are noise for them.
AZURE_FAVORING_PROFILES: FrozenSet[SearchProfile] = frozenset(
    {
        SearchProfile.CORE,
        SearchProfile.SECURITY,
        SearchProfile.EVENT_DRIVEN,
        SearchProfile.PERFORMANCE,
        SearchProfile.DEVOPS,
        SearchProfile.BACKEND,
        SearchProfile.CSHARP_AZURE_NO_FRONTEND,
        SearchProfile.AZ204_CSHARP,
    }
)

# Scoring categories read by the ranking component
SCORING_CATEGORIES = (
    "core_azure",
    "security",
    "event_driven",
    "performance",
    "devops",
    "seniority",
    "core_net",
    "frontend_frameworks",
    "legacy_modernization",
)

DEFAULT_WEIGHTS: Dict[str, float] = {
    "core_azure": 20,
    "security": 15,
    "event_driven": 10,
    "performance": 10,
    "devops": 0,
    "seniority": 5,
    "core_net": 20,
    "frontend_frameworks": 0,
    "legacy_modernization": 20,
}

PROFILE_WEIGHT_DISTRIBUTIONS: Dict[SearchProfile, Dict[str, float]] = {
    SearchProfile.CORE: {
        "core_azure": 25,
        "security": 10,
        "event_driven": 15,
        "performance": 10,
        "devops": 0,
        "seniority": 10,
        "core_net": 20,
        "frontend_frameworks": 5,
        "legacy_modernization": 5,
    },
    SearchProfile.SECURITY: {
        "core_azure": 15,
        "security": 35,
        "event_driven": 10,
        "performance": 5,
        "devops": 0,
        "seniority": 15,
        "core_net": 15,
        "frontend_frameworks": 0,
        "legacy_modernization": 5,
    },
    SearchProfile.EVENT_DRIVEN: {
        "core_azure": 15,
        "security": 10,
        "event_driven": 30,
        "performance": 15,
        "devops": 0,
        "seniority": 10,
        "core_net": 15,
        "frontend_frameworks": 0,
        "legacy_modernization": 5,
    },
    SearchProfile.PERFORMANCE: {
        "core_azure": 15,
        "security": 5,
        "event_driven": 10,
        "performance": 30,
        "devops": 0,
        "seniority": 10,
        "core_net": 20,
        "frontend_frameworks": 5,
        "legacy_modernization": 5,
    },
    SearchProfile.DEVOPS: {
        "core_azure": 20,
        "security": 10,
        "event_driven": 10,
        "performance": 10,
        "devops": 0,
        "seniority": 10,
        "core_net": 25,
        "frontend_frameworks": 10,
        "legacy_modernization": 5,
    },
    SearchProfile.BACKEND: {
        "core_azure": 20,
        "security": 15,
        "event_driven": 15,
        "performance": 10,
        "devops": 0,
        "seniority": 10,
        "core_net": 25,
        "frontend_frameworks": 0,
        "legacy_modernization": 5,
    },
    SearchProfile.CORE_NET: {
        "core_azure": 10,
        "security": 10,
        "event_driven": 5,
        "performance": 15,
        "devops": 0,
        "seniority": 10,
        "core_net": 40,
        "frontend_frameworks": 5,
        "legacy_modernization": 5,
    },
    SearchProfile.LEGACY_MODERNIZATION: {
        "core_azure": 15,
        "security": 5,
        "event_driven": 10,
        "performance": 10,
        "devops": 0,
        "seniority": 15,
        "core_net": 20,
        "frontend_frameworks": 5,
        "legacy_modernization": 20,
    },
    SearchProfile.CONTRACT: {
        "core_azure": 10,
        "security": 10,
        "event_driven": 5,
        "performance": 15,
        "devops": 0,
        "seniority": 10,
        "core_net": 40,
        "frontend_frameworks": 5,
        "legacy_modernization": 5,
    },
}


def resolve_profile(profile: Union[str, SearchProfile, None]) -> Optional[SearchProfile]:
    """
    Resolve a profile tag to a SearchProfile.

    Args:
        profile: Profile tag as found on a job (case-insensitive) or enum member

    Returns:
        Matching SearchProfile, or None for empty/unknown tags
    """
    if profile is None:
        return None
    if isinstance(profile, SearchProfile):
        return profile

    try:
        return SearchProfile(profile.strip().lower())
    except ValueError:
        return None


def get_base_weights(profile: Union[str, SearchProfile, None] = None) -> Dict[str, float]:
    """Return a copy of the base category weights for a profile (defaults if unknown)."""
    resolved = resolve_profile(profile)
    if resolved is not None and resolved in PROFILE_WEIGHT_DISTRIBUTIONS:
        return dict(PROFILE_WEIGHT_DISTRIBUTIONS[resolved])
    return dict(DEFAULT_WEIGHTS)
