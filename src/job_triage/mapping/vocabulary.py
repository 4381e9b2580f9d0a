"""Canonical field vocabulary for application forms."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Heuristic matches always report at least this confidence
HEURISTIC_CONFIDENCE = 0.95

# Fallback classifiers are capped here so they never look like a rule match
FALLBACK_MAX_CONFIDENCE = 0.9


class CanonicalKey(str, Enum):
    """Semantic field keys an application form label can be mapped to."""

    FULL_NAME = "full_name"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    PHONE = "phone"
    CITY = "city"
    WORK_AUTHORIZATION = "work_authorization"
    REQUIRES_SPONSORSHIP = "requires_sponsorship"
    YEARS_DOTNET = "years_dotnet"
    YEARS_AZURE = "years_azure"
    LINKEDIN_URL = "linkedin_url"
    SALARY_EXPECTATION = "salary_expectation"
    US_TIMEZONE = "us_timezone"
    WHY_FIT = "why_fit"
    UNKNOWN = "unknown"

    @classmethod
    def known(cls) -> list:
        """All keys except UNKNOWN."""
        return [key for key in cls if key is not cls.UNKNOWN]

    @classmethod
    def parse(cls, value: str) -> "CanonicalKey":
        """Parse a key, mapping anything outside the vocabulary to UNKNOWN."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class LabelMapping(BaseModel):
    """
    Resolution of one form label.

    ``source`` records which tier produced it: heuristic, cache or fallback.
    """

    label: str
    key: CanonicalKey
    confidence: float = Field(ge=0.0, le=1.0)
    source: str = "fallback"

    model_config = ConfigDict(frozen=True)

    @classmethod
    def unknown(cls, label: str, source: str = "fallback") -> "LabelMapping":
        return cls(label=label, key=CanonicalKey.UNKNOWN, confidence=0.0, source=source)
