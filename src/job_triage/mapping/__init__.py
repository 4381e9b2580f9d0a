"""Application form label mapping."""

from job_triage.mapping.classifiers import (
    LabelClassifier,
    LexicalLabelClassifier,
    LLMLabelClassifier,
)
from job_triage.mapping.heuristics import HEURISTICS, match_heuristic
from job_triage.mapping.mapper import LabelMapper, map_labels_smart
from job_triage.mapping.vocabulary import (
    FALLBACK_MAX_CONFIDENCE,
    HEURISTIC_CONFIDENCE,
    CanonicalKey,
    LabelMapping,
)

__all__ = [
    "CanonicalKey",
    "FALLBACK_MAX_CONFIDENCE",
    "HEURISTICS",
    "HEURISTIC_CONFIDENCE",
    "LabelClassifier",
    "LabelMapper",
    "LabelMapping",
    "LexicalLabelClassifier",
    "LLMLabelClassifier",
    "map_labels_smart",
    "match_heuristic",
]
