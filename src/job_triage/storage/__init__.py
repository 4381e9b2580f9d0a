"""Learning state storage backends."""

from job_triage.storage.base import LearningStorage, StorageError
from job_triage.storage.firestore_storage import FirestoreLearningStorage
from job_triage.storage.memory import MemoryLearningStorage

__all__ = [
    "FirestoreLearningStorage",
    "LearningStorage",
    "MemoryLearningStorage",
    "StorageError",
]
