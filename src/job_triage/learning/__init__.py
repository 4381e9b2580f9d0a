"""Rejection learning: pattern analysis, weight adjustments and learned state models.

The engine itself lives in ``job_triage.learning.engine``.
"""

from job_triage.learning.analyzer import (
    RejectionAnalysis,
    RejectionAnalyzer,
    analyze_rejection,
    analyze_rejection_keywords,
    convert_patterns_to_adjustments,
    extract_company_from_rejection,
    extract_seniority_from_rejection,
    extract_tech_keywords,
)
from job_triage.learning.models import (
    FilterStat,
    LabelMappingRecord,
    RejectionLearningEvent,
    RejectionPattern,
    SuggestedAdjustment,
    WeightAdjustment,
)
from job_triage.learning.weights import compute_active_weights, normalize_weights, validate_weights

__all__ = [
    "FilterStat",
    "LabelMappingRecord",
    "RejectionAnalysis",
    "RejectionAnalyzer",
    "RejectionLearningEvent",
    "RejectionPattern",
    "SuggestedAdjustment",
    "WeightAdjustment",
    "analyze_rejection",
    "analyze_rejection_keywords",
    "compute_active_weights",
    "convert_patterns_to_adjustments",
    "extract_company_from_rejection",
    "extract_seniority_from_rejection",
    "extract_tech_keywords",
    "normalize_weights",
    "validate_weights",
]
