"""
Form label mapping.

Maps free-text application form labels to canonical keys with three tiers:

1. Heuristics: ordered regex rules, deterministic, confidence >= 0.95
2. Cache: earlier fallback results above a confidence floor
3. Fallback classifier: best guess, bounded by a per-label timeout

Fallback failures and timeouts resolve to unknown so a form fill never
aborts because one label could not be classified.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from job_triage.learning.models import LabelMappingRecord, utcnow
from job_triage.logging_config import get_structured_logger
from job_triage.mapping.classifiers import LabelClassifier, LexicalLabelClassifier
from job_triage.mapping.heuristics import match_heuristic
from job_triage.mapping.vocabulary import FALLBACK_MAX_CONFIDENCE, CanonicalKey, LabelMapping
from job_triage.storage.base import LearningStorage, StorageError

logger = logging.getLogger(__name__)
slogger = get_structured_logger(__name__)

DEFAULT_FALLBACK_TIMEOUT = 5.0
DEFAULT_CACHE_MIN_CONFIDENCE = 0.7


def cache_key(label: str) -> str:
    """Case- and whitespace-insensitive cache key for a label."""
    return " ".join((label or "").lower().split())


class LabelMapper:
    """
    Heuristic-first label mapper with a swappable fallback classifier.

    Example:
        ```python
        mapper = LabelMapper(LexicalLabelClassifier(), storage=storage)
        mappings = await mapper.map_labels_smart(["Email Address", "Desired salary"])
        ```
    """

    def __init__(
        self,
        classifier: Optional[LabelClassifier] = None,
        storage: Optional[LearningStorage] = None,
        timeout: float = DEFAULT_FALLBACK_TIMEOUT,
        cache_min_confidence: float = DEFAULT_CACHE_MIN_CONFIDENCE,
    ):
        """
        Initialize label mapper.

        Args:
            classifier: Fallback classifier; None resolves unmatched labels to unknown
            storage: Learning storage holding the label cache; None disables caching
            timeout: Seconds allowed per fallback lookup
            cache_min_confidence: Cached mappings at or below this are ignored
        """
        self.classifier = classifier
        self.storage = storage
        self.timeout = timeout
        self.cache_min_confidence = cache_min_confidence

    async def map_labels_smart(self, labels: Sequence[str]) -> List[LabelMapping]:
        """
        Map labels to canonical keys.

        Args:
            labels: Form labels in page order (duplicates allowed)

        Returns:
            One mapping per label, in input order
        """
        if not labels:
            return []

        results: List[Optional[LabelMapping]] = [None] * len(labels)
        pending: Dict[str, List[int]] = {}

        for index, label in enumerate(labels):
            if not (label or "").strip():
                results[index] = LabelMapping.unknown(label or "", source="heuristic")
                continue

            mapping = match_heuristic(label)
            if mapping is not None:
                results[index] = mapping
                slogger.mapping_activity(label, mapping.key.value, mapping.source, mapping.confidence)
                continue

            pending.setdefault(label, []).append(index)

        if pending:
            unique_labels = list(pending)
            resolved = await asyncio.gather(*(self._resolve(label) for label in unique_labels))

            for label, mapping in zip(unique_labels, resolved):
                for index in pending[label]:
                    results[index] = mapping
                slogger.mapping_activity(label, mapping.key.value, mapping.source, mapping.confidence)

        return [mapping for mapping in results if mapping is not None]

    async def _resolve(self, label: str) -> LabelMapping:
        """Cache, then fallback classifier. Storage calls run in worker threads."""
        mapping = await self._cached(label)
        if mapping is not None:
            return mapping

        mapping = await self._classify(label)
        if self.storage is not None and mapping.key is not CanonicalKey.UNKNOWN:
            await asyncio.to_thread(self._save_cache, mapping)
        return mapping

    async def _cached(self, label: str) -> Optional[LabelMapping]:
        if self.storage is None:
            return None

        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._lookup_cache, label), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Label cache read timed out after {self.timeout}s for '{label}'")
            return None

    async def _classify(self, label: str) -> LabelMapping:
        if self.classifier is None:
            return LabelMapping.unknown(label)

        try:
            mapping = await asyncio.wait_for(self.classifier.classify(label), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Label classifier timed out after {self.timeout}s for '{label}'")
            return LabelMapping.unknown(label)
        except Exception as e:
            logger.warning(f"Label classifier failed for '{label}': {str(e)}")
            return LabelMapping.unknown(label)

        if mapping.key is CanonicalKey.UNKNOWN:
            return LabelMapping.unknown(label)
        return LabelMapping(
            label=label,
            key=mapping.key,
            confidence=min(mapping.confidence, FALLBACK_MAX_CONFIDENCE),
            source="fallback",
        )

    def _lookup_cache(self, label: str) -> Optional[LabelMapping]:
        if self.storage is None:
            return None

        try:
            record = self.storage.get_label_mapping(cache_key(label))
        except StorageError as e:
            logger.warning(f"Label cache read failed for '{label}': {str(e)}")
            return None

        if record is None or record.confidence <= self.cache_min_confidence:
            return None

        key = CanonicalKey.parse(record.key)
        if key is CanonicalKey.UNKNOWN:
            return None
        return LabelMapping(label=label, key=key, confidence=record.confidence, source="cache")

    def _save_cache(self, mapping: LabelMapping) -> None:
        if self.storage is None or mapping.key is CanonicalKey.UNKNOWN:
            return

        record = LabelMappingRecord(
            label=cache_key(mapping.label),
            key=mapping.key.value,
            confidence=mapping.confidence,
            updated_at=utcnow(),
        )
        try:
            self.storage.save_label_mapping(record)
        except StorageError as e:
            logger.warning(f"Label cache write failed for '{mapping.label}': {str(e)}")


_default_mapper = LabelMapper(LexicalLabelClassifier())


async def map_labels_smart(
    labels: Sequence[str], mapper: Optional[LabelMapper] = None
) -> List[LabelMapping]:
    """Map labels with the given mapper, or a cache-less lexical mapper by default."""
    return await (mapper or _default_mapper).map_labels_smart(labels)
