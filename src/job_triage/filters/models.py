"""
Filter models for job relevance filtering.

These models define the job input seen by filters and the verdict they return.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class JobPosting:
    """
    Job posting as seen by the filter chain.

    Attributes:
        title: Job title
        company: Company name
        description: Full job description text
        profile: Search profile tag the job was found with (e.g. "core", "legacy-web")
    """

    title: str = ""
    company: str = ""
    description: str = ""
    profile: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JobPosting":
        """
        Build a JobPosting from scraper/job dict data.

        Missing or None fields become empty strings.
        """
        return cls(
            title=data.get("title") or "",
            company=data.get("company") or "",
            description=data.get("description") or "",
            profile=data.get("profile") or None,
        )

    @property
    def searchable_text(self) -> str:
        """Lowercased title and description joined for keyword scans."""
        return f"{self.title} {self.description}".lower()


@dataclass(frozen=True)
class FilterVerdict:
    """
    Result of running a filter (or the whole chain) on a job.

    Attributes:
        blocked: True if the job should be dropped
        reason: Human-readable reason, only present when blocked
        filter_type: Type of the filter that blocked (e.g. "LocationRequirement")
    """

    blocked: bool
    reason: Optional[str] = None
    filter_type: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.blocked and (self.reason is not None or self.filter_type is not None):
            raise ValueError("An allowed verdict cannot carry a reason")

    @classmethod
    def allow(cls) -> "FilterVerdict":
        return cls(blocked=False)

    @classmethod
    def block(cls, reason: str, filter_type: str) -> "FilterVerdict":
        return cls(blocked=True, reason=reason, filter_type=filter_type)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data: Dict[str, Any] = {"blocked": self.blocked}
        if self.blocked:
            data["reason"] = self.reason
            data["filter_type"] = self.filter_type
        return data
