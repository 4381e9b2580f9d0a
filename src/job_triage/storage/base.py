"""Storage contract for rejection learning state."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from job_triage.learning.models import (
    LabelMappingRecord,
    RejectionLearningEvent,
    RejectionPattern,
)


class StorageError(RuntimeError):
    """Raised when the learning store cannot be read or written."""


class LearningStorage(ABC):
    """
    Persistence layer used by the rejection learning engine and label mapper.

    Implementations raise StorageError on backend failures; callers decide
    whether to retry. Serialization of read-modify-write sequences is the
    engine's job, not the storage's.
    """

    # Weight adjustments

    @abstractmethod
    def get_weight_deltas(self) -> Dict[str, float]:
        """Return current delta per category (categories never adjusted may be absent)."""

    @abstractmethod
    def set_weight_delta(self, category: str, delta: float) -> None:
        """Persist the delta for one category."""

    @abstractmethod
    def reset_weight_deltas(self) -> None:
        """Remove all weight deltas."""

    # Learning events

    @abstractmethod
    def append_learning_event(self, event: RejectionLearningEvent) -> None:
        """Append an audit record."""

    @abstractmethod
    def get_learning_events(self, limit: int) -> List[RejectionLearningEvent]:
        """Return up to ``limit`` events, most recent first."""

    @abstractmethod
    def clear_learning_events(self) -> None:
        """Remove all learning events."""

    # Rejection patterns

    @abstractmethod
    def increment_pattern(self, pattern_type: str, value: str, amount: int = 1) -> RejectionPattern:
        """Increment a pattern counter (creating it at ``amount``) and return the new state."""

    @abstractmethod
    def get_patterns(self, limit: Optional[int] = None) -> List[RejectionPattern]:
        """Return patterns by count descending, ties broken by most recently seen."""

    @abstractmethod
    def clear_patterns(self) -> None:
        """Remove all pattern counters."""

    # Filter hit counters

    @abstractmethod
    def increment_filter_hit(self, filter_type: str) -> None:
        """Count one rejection attributed to a filter type."""

    @abstractmethod
    def get_filter_hits(self) -> Dict[str, int]:
        """Return rejection counts per filter type."""

    @abstractmethod
    def clear_filter_hits(self) -> None:
        """Remove all filter hit counters."""

    # Label mapping cache

    @abstractmethod
    def get_label_mapping(self, label: str) -> Optional[LabelMappingRecord]:
        """Return a cached label mapping, if any."""

    @abstractmethod
    def save_label_mapping(self, record: LabelMappingRecord) -> None:
        """Insert or replace a cached label mapping."""

    @abstractmethod
    def clear_label_mappings(self) -> None:
        """Remove all cached label mappings."""
