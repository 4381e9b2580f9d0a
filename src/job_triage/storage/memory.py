"""In-process learning storage."""

import itertools
import logging
import threading
from typing import Dict, List, Optional, Tuple

from job_triage.learning.models import (
    LabelMappingRecord,
    RejectionLearningEvent,
    RejectionPattern,
    utcnow,
)
from job_triage.storage.base import LearningStorage

logger = logging.getLogger(__name__)


class MemoryLearningStorage(LearningStorage):
    """
    Thread-safe dictionary-backed storage.

    State lives only as long as the process. Used for tests, dry runs and the
    CLI when no Firestore database is configured.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._deltas: Dict[str, float] = {}
        self._events: List[RejectionLearningEvent] = []
        # {(type, value): (pattern, sequence)}; sequence orders patterns seen at the same instant
        self._patterns: Dict[Tuple[str, str], Tuple[RejectionPattern, int]] = {}
        self._sequence = itertools.count()
        self._filter_hits: Dict[str, int] = {}
        self._label_mappings: Dict[str, LabelMappingRecord] = {}

    def get_weight_deltas(self) -> Dict[str, float]:
        with self._lock:
            return dict(self._deltas)

    def set_weight_delta(self, category: str, delta: float) -> None:
        with self._lock:
            self._deltas[category] = delta

    def reset_weight_deltas(self) -> None:
        with self._lock:
            self._deltas.clear()

    def append_learning_event(self, event: RejectionLearningEvent) -> None:
        with self._lock:
            self._events.append(event)

    def get_learning_events(self, limit: int) -> List[RejectionLearningEvent]:
        with self._lock:
            return list(reversed(self._events))[:limit]

    def clear_learning_events(self) -> None:
        with self._lock:
            self._events.clear()

    def increment_pattern(self, pattern_type: str, value: str, amount: int = 1) -> RejectionPattern:
        with self._lock:
            existing = self._patterns.get((pattern_type, value))
            count = (existing[0].count if existing else 0) + amount
            pattern = RejectionPattern(
                type=pattern_type, value=value, count=count, last_seen=utcnow()
            )
            self._patterns[(pattern_type, value)] = (pattern, next(self._sequence))
            return pattern

    def get_patterns(self, limit: Optional[int] = None) -> List[RejectionPattern]:
        with self._lock:
            ranked = sorted(
                self._patterns.values(), key=lambda item: (item[0].count, item[1]), reverse=True
            )
        patterns = [pattern for pattern, _ in ranked]
        return patterns if limit is None else patterns[:limit]

    def clear_patterns(self) -> None:
        with self._lock:
            self._patterns.clear()

    def increment_filter_hit(self, filter_type: str) -> None:
        with self._lock:
            self._filter_hits[filter_type] = self._filter_hits.get(filter_type, 0) + 1

    def get_filter_hits(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._filter_hits)

    def clear_filter_hits(self) -> None:
        with self._lock:
            self._filter_hits.clear()

    def get_label_mapping(self, label: str) -> Optional[LabelMappingRecord]:
        with self._lock:
            return self._label_mappings.get(label)

    def save_label_mapping(self, record: LabelMappingRecord) -> None:
        with self._lock:
            self._label_mappings[record.label] = record

    def clear_label_mappings(self) -> None:
        with self._lock:
            count = len(self._label_mappings)
            self._label_mappings.clear()
        logger.debug(f"Cleared {count} cached label mappings")
