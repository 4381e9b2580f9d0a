"""
Pydantic models for rejection learning state.

Field names are snake_case in Python and camelCase in Firestore documents;
``to_firestore``/``from_firestore`` convert between the two.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Python snake_case → Firestore camelCase
FIELD_MAPPING = {
    "pattern_type": "patternType",
    "pattern_value": "patternValue",
    "last_seen": "lastSeen",
    "filter_type": "filterType",
    "updated_at": "updatedAt",
}


def to_firestore_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert snake_case field names to Firestore camelCase, dropping None values."""
    return {FIELD_MAPPING.get(k, k): v for k, v in data.items() if v is not None}


def from_firestore_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert Firestore camelCase field names to snake_case."""
    reverse_mapping = {v: k for k, v in FIELD_MAPPING.items()}
    return {reverse_mapping.get(k, k): v for k, v in data.items()}


class WeightAdjustment(BaseModel):
    """
    Learned nudge applied on top of a scoring category's base weight.

    ``delta`` is a signed percentage, bounded by the engine's weight clamp.
    """

    category: str
    delta: float = 0.0
    updated_at: Optional[datetime] = None

    def to_firestore(self) -> Dict[str, Any]:
        return to_firestore_fields(self.model_dump())

    @classmethod
    def from_firestore(cls, data: Dict[str, Any]) -> "WeightAdjustment":
        return cls(**from_firestore_fields(data))


class RejectionPattern(BaseModel):
    """
    Recurring token or phrase extracted from rejection reasons.

    Example: type="tech_stack", value="React", count=7
    """

    type: str = Field(alias="pattern_type")
    value: str = Field(alias="pattern_value")
    count: int = Field(default=1, gt=0)
    last_seen: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)

    @property
    def key(self) -> str:
        return f"{self.type}:{self.value}"

    def to_firestore(self) -> Dict[str, Any]:
        return to_firestore_fields(self.model_dump(by_alias=True))

    @classmethod
    def from_firestore(cls, data: Dict[str, Any]) -> "RejectionPattern":
        return cls(**from_firestore_fields(data))


class RejectionLearningEvent(BaseModel):
    """Immutable audit record of one weight mutation."""

    timestamp: datetime = Field(default_factory=utcnow)
    category: str
    adjustment: float
    reason: str
    job_title: Optional[str] = None
    company: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    def to_firestore(self) -> Dict[str, Any]:
        return to_firestore_fields(self.model_dump())

    @classmethod
    def from_firestore(cls, data: Dict[str, Any]) -> "RejectionLearningEvent":
        return cls(**from_firestore_fields(data))


class FilterStat(BaseModel):
    """Number of rejections attributable to one filter type."""

    type: str
    count: int


class SuggestedAdjustment(BaseModel):
    """Weight change suggested by rejection analysis, before clamping."""

    category: str
    adjustment: float
    reason: str


class LabelMappingRecord(BaseModel):
    """Cached label → canonical key resolution."""

    label: str
    key: str
    confidence: float = Field(ge=0.0, le=1.0)
    updated_at: Optional[datetime] = None

    def to_firestore(self) -> Dict[str, Any]:
        return to_firestore_fields(self.model_dump())

    @classmethod
    def from_firestore(cls, data: Dict[str, Any]) -> "LabelMappingRecord":
        return cls(**from_firestore_fields(data))
