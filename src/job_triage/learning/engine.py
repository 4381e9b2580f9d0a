"""
Rejection learning engine.

Owns all mutation of learned state: weight deltas, the learning event log,
rejection pattern counters and filter hit counters. Every read-modify-write
happens under one lock, so concurrent rejections behave as if applied one
after another and no update is lost.
"""

import logging
import threading
from collections import defaultdict
from typing import Any, Dict, List, Optional, Union

from job_triage.config import LearningConfig
from job_triage.filters.chain import (
    FilterChain,
    build_pattern_filters,
    count_pattern_filter_sources,
)
from job_triage.filters.models import FilterVerdict, JobPosting
from job_triage.learning.analyzer import RejectionAnalysis, RejectionAnalyzer
from job_triage.learning.models import (
    FilterStat,
    RejectionLearningEvent,
    RejectionPattern,
    WeightAdjustment,
)
from job_triage.learning.weights import compute_active_weights, validate_weights
from job_triage.logging_config import get_structured_logger
from job_triage.profiles import SCORING_CATEGORIES, SearchProfile, get_base_weights, resolve_profile
from job_triage.storage.base import LearningStorage

logger = logging.getLogger(__name__)
slogger = get_structured_logger(__name__)

MANUAL_FILTER_TYPES = ("company", "keyword", "tech_stack", "seniority")

# AI filter suggestion type -> pattern type
SUGGESTED_FILTER_PATTERNS = {
    "block_company": "company",
    "avoid_keyword": "keyword",
}

JobInput = Union[JobPosting, Dict[str, Any]]


class RejectionLearningEngine:
    """
    Learns scoring weight nudges and job filters from rejected jobs.

    Example:
        ```python
        engine = RejectionLearningEngine(MemoryLearningStorage())
        engine.record_rejection(job, "Too junior for me")
        engine.get_active_adjustments()  # [WeightAdjustment(category="seniority", delta=2.0)]
        ```
    """

    def __init__(
        self,
        storage: LearningStorage,
        config: Optional[LearningConfig] = None,
        analyzer: Optional[RejectionAnalyzer] = None,
        chain: Optional[FilterChain] = None,
    ):
        """
        Initialize the engine.

        Args:
            storage: Persistence for learned state
            config: Learning tuning (clamp, step sizes, filter threshold)
            analyzer: Rejection analyzer (keyword-only by default)
            chain: Static filter chain used for filtering and hit attribution
        """
        self.storage = storage
        self.config = config or LearningConfig()
        self.analyzer = analyzer or RejectionAnalyzer()
        self.chain = chain or FilterChain.default()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_rejection(
        self, job: JobInput, reason: str, category: Optional[str] = None
    ) -> List[RejectionLearningEvent]:
        """
        Learn from one rejected job.

        Counts which static filters would have blocked the job, records the
        patterns found in ``reason`` and applies bounded weight changes.

        Args:
            job: Rejected job posting (or job dict)
            reason: Free-text rejection reason
            category: Scoring category to penalise; derived from the reason when omitted

        Returns:
            Learning events for the weight changes that were applied

        Raises:
            ValueError: If ``category`` is not a known scoring category
            StorageError: If learned state cannot be read or written
        """
        if isinstance(job, dict):
            job = JobPosting.from_dict(job)
        if category is not None and category not in SCORING_CATEGORIES:
            raise ValueError(
                f"Unknown scoring category: {category}. Known categories: {', '.join(SCORING_CATEGORIES)}"
            )

        reason = (reason or "").strip()
        analysis = self.analyzer.analyze(reason, job)

        with self._lock:
            self._record_filter_hits(job)
            self._record_patterns(analysis)
            events = self._apply_adjustments(job, reason, analysis, category)

        slogger.learning_activity(
            "REJECTION RECORDED",
            {
                "job": job.title,
                "company": job.company,
                "patterns": len(analysis.patterns),
                "adjustments": len(events),
                "target_seniority": analysis.target_seniority,
            },
        )
        return events

    def _record_filter_hits(self, job: JobPosting) -> None:
        profile = resolve_profile(job.profile)
        for job_filter in self.chain.filters:
            if job_filter.evaluate(job, profile).blocked:
                self.storage.increment_filter_hit(job_filter.filter_type)

    def _record_patterns(self, analysis: RejectionAnalysis) -> None:
        for pattern in analysis.patterns:
            self.storage.increment_pattern(pattern.type, pattern.value)

        for suggested in analysis.filters:
            pattern_type = SUGGESTED_FILTER_PATTERNS.get(suggested.type)
            if pattern_type is None:
                logger.debug(f"Ignoring unsupported filter suggestion: {suggested.type}")
                continue
            self.storage.increment_pattern(pattern_type, suggested.value)

    def _compute_steps(
        self, analysis: RejectionAnalysis, category: Optional[str]
    ) -> Dict[str, Dict[str, Any]]:
        """Sum suggestions per category and clip each to max_step."""
        steps: Dict[str, float] = defaultdict(float)
        reasons: Dict[str, List[str]] = defaultdict(list)

        for suggestion in analysis.suggested_adjustments:
            if suggestion.category not in SCORING_CATEGORIES:
                logger.warning(f"Cannot adjust unknown category: {suggestion.category} - skipping")
                continue
            steps[suggestion.category] += suggestion.adjustment
            if suggestion.reason not in reasons[suggestion.category]:
                reasons[suggestion.category].append(suggestion.reason)

        if category is not None and category not in steps:
            steps[category] = -self.config.step
            reasons[category].append(f"Rejected for {category}")

        max_step = self.config.max_step
        return {
            cat: {"step": max(-max_step, min(max_step, step)), "reason": "; ".join(reasons[cat])}
            for cat, step in steps.items()
            if step != 0
        }

    def _apply_adjustments(
        self,
        job: JobPosting,
        reason: str,
        analysis: RejectionAnalysis,
        category: Optional[str],
    ) -> List[RejectionLearningEvent]:
        steps = self._compute_steps(analysis, category)
        if not steps:
            return []

        clamp = self.config.weight_clamp
        deltas = self.storage.get_weight_deltas()
        events = []

        for cat, change in steps.items():
            old_delta = deltas.get(cat, 0.0)
            new_delta = max(-clamp, min(clamp, old_delta + change["step"]))
            applied = new_delta - old_delta

            if abs(applied) < self.config.min_adjustment:
                logger.info(f"Skipping small adjustment: {cat} {applied:+.2f}% - {change['reason']}")
                continue

            self.storage.set_weight_delta(cat, new_delta)
            event = RejectionLearningEvent(
                category=cat,
                adjustment=applied,
                reason=f"{change['reason']} ({reason})" if reason else change["reason"],
                job_title=job.title or None,
                company=job.company or None,
            )
            self.storage.append_learning_event(event)
            events.append(event)

            slogger.learning_activity(
                "WEIGHT ADJUSTED",
                {"category": cat, "delta": f"{old_delta:+.1f} -> {new_delta:+.1f}", "reason": change["reason"]},
            )

        return events

    def add_manual_filter(self, pattern_type: str, value: str) -> RejectionPattern:
        """
        Add a filter by hand.

        The pattern is seeded at the activation threshold so the filter is
        active immediately.

        Raises:
            ValueError: For unknown pattern types or an empty value
        """
        if pattern_type not in MANUAL_FILTER_TYPES:
            raise ValueError(
                f"Unsupported filter type: {pattern_type}. Supported types: {', '.join(MANUAL_FILTER_TYPES)}"
            )
        value = (value or "").strip()
        if not value:
            raise ValueError("Filter value cannot be empty")

        threshold = self.config.pattern_threshold
        with self._lock:
            existing = next(
                (
                    p
                    for p in self.storage.get_patterns()
                    if p.type == pattern_type and p.value == value
                ),
                None,
            )
            current = existing.count if existing else 0
            if current >= threshold:
                return existing
            pattern = self.storage.increment_pattern(pattern_type, value, amount=threshold - current)

        slogger.learning_activity("MANUAL FILTER ADDED", {"type": pattern_type, "value": value})
        return pattern

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def build_chain(self) -> FilterChain:
        """Static chain followed by filters learned from the current patterns."""
        patterns = self.storage.get_patterns()
        return self.chain.extended(build_pattern_filters(patterns, self.config.pattern_threshold))

    def apply_filters(
        self, job: JobInput, profile: Union[str, SearchProfile, None] = None
    ) -> FilterVerdict:
        """
        Evaluate a job against static and learned filters.

        Raises:
            StorageError: If patterns cannot be read
        """
        verdict = self.build_chain().evaluate(job, profile)
        if verdict.blocked:
            title = job.get("title", "") if isinstance(job, dict) else job.title
            company = job.get("company", "") if isinstance(job, dict) else job.company
            slogger.filter_activity(
                title, company, "BLOCKED", {"filter": verdict.filter_type, "reason": verdict.reason}
            )
        return verdict

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_active_adjustments(self) -> List[WeightAdjustment]:
        """Categories with a non-zero learned delta, by category name."""
        deltas = self.storage.get_weight_deltas()
        return [
            WeightAdjustment(category=category, delta=delta)
            for category, delta in sorted(deltas.items())
            if delta != 0
        ]

    def get_top_patterns(self, limit: int = 10) -> List[RejectionPattern]:
        """Highest-count patterns, ties broken by most recently seen."""
        if limit <= 0:
            return []
        return self.storage.get_patterns(limit=limit)

    def get_recent_learnings(self, limit: int = 20) -> List[RejectionLearningEvent]:
        """Most recent learning events first."""
        if limit <= 0:
            return []
        return self.storage.get_learning_events(limit)

    def get_filter_stats(self) -> List[FilterStat]:
        """
        Rejections attributable to each filter type.

        Static filters count recorded rejections they would have blocked;
        learned filters count the pattern occurrences that activated them.
        """
        with self._lock:
            counts = {t: c for t, c in self.storage.get_filter_hits().items() if c > 0}
            patterns = self.storage.get_patterns()

        for filter_type, count in count_pattern_filter_sources(
            patterns, self.config.pattern_threshold
        ).items():
            counts[filter_type] = counts.get(filter_type, 0) + count

        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [FilterStat(type=filter_type, count=count) for filter_type, count in ranked]

    def get_active_weights(self, profile: Union[str, SearchProfile, None] = None) -> Dict[str, float]:
        """Normalised base weights plus learned deltas for a profile."""
        return compute_active_weights(get_base_weights(profile), self.storage.get_weight_deltas())

    def get_weight_summary(self, profile: Union[str, SearchProfile, None] = None) -> Dict[str, Any]:
        """Base weights, learned deltas and effective weights in one snapshot."""
        base_weights = get_base_weights(profile)
        deltas = self.storage.get_weight_deltas()
        active_weights = compute_active_weights(base_weights, deltas)
        return {
            "base_weights": base_weights,
            "adjustments": deltas,
            "active_weights": active_weights,
            "total_adjustment": sum(deltas.values()),
            "validation": validate_weights(active_weights),
        }

    # ------------------------------------------------------------------
    # Resets
    # ------------------------------------------------------------------

    def reset_weight_adjustments(self) -> None:
        """Drop all learned deltas and the learning event log."""
        with self._lock:
            self.storage.reset_weight_deltas()
            self.storage.clear_learning_events()
        slogger.learning_activity("RESET weight adjustments")

    def clear_all_filters(self) -> None:
        """Drop all rejection patterns (and so all learned filters) and filter hit counts."""
        with self._lock:
            self.storage.clear_patterns()
            self.storage.clear_filter_hits()
        slogger.learning_activity("CLEARED rejection patterns and filters")

    def clear_all_caches(self) -> None:
        """Drop cached label mappings."""
        with self._lock:
            self.storage.clear_label_mappings()
        slogger.learning_activity("CLEARED label mapping cache")
