"""Store rejection learning state in Firestore."""

import hashlib
from typing import Dict, List, Optional

from google.cloud import firestore as gcloud_firestore

from job_triage.learning.models import (
    LabelMappingRecord,
    RejectionLearningEvent,
    RejectionPattern,
)
from job_triage.logging_config import get_structured_logger
from job_triage.storage.base import LearningStorage, StorageError
from job_triage.storage.firestore_client import FirestoreClient

slogger = get_structured_logger(__name__)

WEIGHTS_COLLECTION = "weight-adjustments"
EVENTS_COLLECTION = "learning-events"
PATTERNS_COLLECTION = "rejection-patterns"
FILTER_HITS_COLLECTION = "filter-hits"
LABEL_MAPPINGS_COLLECTION = "label-mappings"

# Firestore caps batched writes at 500 operations
BATCH_SIZE = 400


def _doc_id(*parts: str) -> str:
    """Stable document ID for free-text keys (which may contain '/')."""
    raw = "\x1f".join(p.strip().lower() for p in parts)
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


class FirestoreLearningStorage(LearningStorage):
    """
    Firestore-backed learning storage.

    Collections:
        weight-adjustments: one document per category ({category, delta, updatedAt})
        learning-events: append-only audit log ordered by timestamp
        rejection-patterns: one document per (type, value) counter
        filter-hits: one document per filter type ({filterType, count})
        label-mappings: cached fallback label resolutions
    """

    def __init__(
        self, credentials_path: Optional[str] = None, database_name: str = "job-triage"
    ):
        """
        Initialize Firestore learning storage.

        Args:
            credentials_path: Path to Firebase service account JSON
            database_name: Firestore database name
        """
        self.database_name = database_name
        self.db = FirestoreClient.get_client(database_name, credentials_path)

    def _delete_collection(self, collection_name: str) -> int:
        deleted = 0
        batch = self.db.batch()
        pending = 0
        for doc in self.db.collection(collection_name).stream():
            batch.delete(doc.reference)
            pending += 1
            deleted += 1
            if pending >= BATCH_SIZE:
                batch.commit()
                batch = self.db.batch()
                pending = 0
        if pending:
            batch.commit()
        slogger.database_activity("delete", collection_name, "success", {"deleted": deleted})
        return deleted

    # Weight adjustments

    def get_weight_deltas(self) -> Dict[str, float]:
        try:
            deltas = {}
            for doc in self.db.collection(WEIGHTS_COLLECTION).stream():
                data = doc.to_dict() or {}
                deltas[data.get("category", doc.id)] = float(data.get("delta", 0.0))
            return deltas
        except Exception as e:
            slogger.database_activity("query", WEIGHTS_COLLECTION, "failed", {"error": e})
            raise StorageError(f"Failed to read weight adjustments: {e}") from e

    def set_weight_delta(self, category: str, delta: float) -> None:
        try:
            self.db.collection(WEIGHTS_COLLECTION).document(category).set(
                {
                    "category": category,
                    "delta": delta,
                    "updatedAt": gcloud_firestore.SERVER_TIMESTAMP,
                }
            )
        except Exception as e:
            slogger.database_activity(
                "update", WEIGHTS_COLLECTION, "failed", {"category": category, "error": e}
            )
            raise StorageError(f"Failed to save weight adjustment: {e}") from e

    def reset_weight_deltas(self) -> None:
        try:
            self._delete_collection(WEIGHTS_COLLECTION)
        except Exception as e:
            raise StorageError(f"Failed to reset weight adjustments: {e}") from e

    # Learning events

    def append_learning_event(self, event: RejectionLearningEvent) -> None:
        try:
            self.db.collection(EVENTS_COLLECTION).add(event.to_firestore())
        except Exception as e:
            slogger.database_activity("create", EVENTS_COLLECTION, "failed", {"error": e})
            raise StorageError(f"Failed to append learning event: {e}") from e

    def get_learning_events(self, limit: int) -> List[RejectionLearningEvent]:
        try:
            query = (
                self.db.collection(EVENTS_COLLECTION)
                .order_by("timestamp", direction=gcloud_firestore.Query.DESCENDING)
                .limit(limit)
            )
            return [RejectionLearningEvent.from_firestore(doc.to_dict()) for doc in query.stream()]
        except Exception as e:
            slogger.database_activity("query", EVENTS_COLLECTION, "failed", {"error": e})
            raise StorageError(f"Failed to read learning events: {e}") from e

    def clear_learning_events(self) -> None:
        try:
            self._delete_collection(EVENTS_COLLECTION)
        except Exception as e:
            raise StorageError(f"Failed to clear learning events: {e}") from e

    # Rejection patterns

    def increment_pattern(self, pattern_type: str, value: str, amount: int = 1) -> RejectionPattern:
        doc_ref = self.db.collection(PATTERNS_COLLECTION).document(_doc_id(pattern_type, value))
        try:
            doc_ref.set(
                {
                    "patternType": pattern_type,
                    "patternValue": value,
                    "count": gcloud_firestore.Increment(amount),
                    "lastSeen": gcloud_firestore.SERVER_TIMESTAMP,
                },
                merge=True,
            )
            return RejectionPattern.from_firestore(doc_ref.get().to_dict())
        except Exception as e:
            slogger.database_activity(
                "update",
                PATTERNS_COLLECTION,
                "failed",
                {"pattern": f"{pattern_type}:{value}", "error": e},
            )
            raise StorageError(f"Failed to update rejection pattern: {e}") from e

    def get_patterns(self, limit: Optional[int] = None) -> List[RejectionPattern]:
        try:
            query = (
                self.db.collection(PATTERNS_COLLECTION)
                .order_by("count", direction=gcloud_firestore.Query.DESCENDING)
                .order_by("lastSeen", direction=gcloud_firestore.Query.DESCENDING)
            )
            if limit is not None:
                query = query.limit(limit)
            return [RejectionPattern.from_firestore(doc.to_dict()) for doc in query.stream()]
        except Exception as e:
            slogger.database_activity("query", PATTERNS_COLLECTION, "failed", {"error": e})
            raise StorageError(f"Failed to read rejection patterns: {e}") from e

    def clear_patterns(self) -> None:
        try:
            self._delete_collection(PATTERNS_COLLECTION)
        except Exception as e:
            raise StorageError(f"Failed to clear rejection patterns: {e}") from e

    # Filter hit counters

    def increment_filter_hit(self, filter_type: str) -> None:
        try:
            self.db.collection(FILTER_HITS_COLLECTION).document(filter_type).set(
                {"filterType": filter_type, "count": gcloud_firestore.Increment(1)}, merge=True
            )
        except Exception as e:
            slogger.database_activity(
                "update", FILTER_HITS_COLLECTION, "failed", {"filter": filter_type, "error": e}
            )
            raise StorageError(f"Failed to update filter stats: {e}") from e

    def get_filter_hits(self) -> Dict[str, int]:
        try:
            hits = {}
            for doc in self.db.collection(FILTER_HITS_COLLECTION).stream():
                data = doc.to_dict() or {}
                hits[data.get("filterType", doc.id)] = int(data.get("count", 0))
            return hits
        except Exception as e:
            slogger.database_activity("query", FILTER_HITS_COLLECTION, "failed", {"error": e})
            raise StorageError(f"Failed to read filter stats: {e}") from e

    def clear_filter_hits(self) -> None:
        try:
            self._delete_collection(FILTER_HITS_COLLECTION)
        except Exception as e:
            raise StorageError(f"Failed to clear filter stats: {e}") from e

    # Label mapping cache

    def get_label_mapping(self, label: str) -> Optional[LabelMappingRecord]:
        try:
            doc = self.db.collection(LABEL_MAPPINGS_COLLECTION).document(_doc_id(label)).get()
            if not doc.exists:
                return None
            return LabelMappingRecord.from_firestore(doc.to_dict())
        except Exception as e:
            slogger.database_activity(
                "query", LABEL_MAPPINGS_COLLECTION, "failed", {"label": label, "error": e}
            )
            raise StorageError(f"Failed to read label mapping: {e}") from e

    def save_label_mapping(self, record: LabelMappingRecord) -> None:
        data = record.to_firestore()
        data["updatedAt"] = gcloud_firestore.SERVER_TIMESTAMP
        try:
            self.db.collection(LABEL_MAPPINGS_COLLECTION).document(_doc_id(record.label)).set(data)
        except Exception as e:
            slogger.database_activity(
                "update", LABEL_MAPPINGS_COLLECTION, "failed", {"label": record.label, "error": e}
            )
            raise StorageError(f"Failed to save label mapping: {e}") from e

    def clear_label_mappings(self) -> None:
        try:
            self._delete_collection(LABEL_MAPPINGS_COLLECTION)
        except Exception as e:
            raise StorageError(f"Failed to clear label mappings: {e}") from e
