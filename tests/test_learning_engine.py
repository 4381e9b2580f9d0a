"""Tests for the rejection learning engine."""

import json
import threading
from unittest.mock import MagicMock

import pytest

from job_triage.config import LearningConfig
from job_triage.filters import JobPosting, apply_filters
from job_triage.learning.analyzer import RejectionAnalyzer
from job_triage.learning.engine import RejectionLearningEngine
from job_triage.storage import LearningStorage, MemoryLearningStorage, StorageError


def job(company="Acme", description="Fully remote", title="Software Engineer"):
    return JobPosting(title=title, company=company, description=description)


class TestRecordRejection:
    """Test weight learning from rejections."""

    def test_too_junior_raises_seniority(self, engine):
        """A 'too junior' reason nudges seniority up."""
        events = engine.record_rejection(job(), "Too junior")

        assert len(events) == 1
        assert events[0].category == "seniority"
        assert events[0].adjustment == 2
        assert events[0].reason == "Too junior - prioritizing more senior jobs (Too junior)"
        assert events[0].company == "Acme"

        adjustments = engine.get_active_adjustments()
        assert [(a.category, a.delta) for a in adjustments] == [("seniority", 2)]

        patterns = engine.get_top_patterns()
        assert [(p.type, p.value, p.count) for p in patterns] == [("seniority", "too junior", 1)]

    def test_accepts_job_dict(self, engine):
        events = engine.record_rejection({"title": "Dev", "company": "Acme"}, "Too junior")
        assert events[0].job_title == "Dev"

    def test_delta_never_exceeds_clamp(self, engine):
        """Forty rejections saturate at the clamp; saturated rejections log nothing."""
        for _ in range(40):
            engine.record_rejection(job(), "Too junior")

        assert engine.storage.get_weight_deltas()["seniority"] == 50
        assert len(engine.get_recent_learnings(100)) == 25

    def test_explicit_category_gets_negative_step(self, engine):
        events = engine.record_rejection(job(), "Not interested", category="security")

        assert len(events) == 1
        assert events[0].category == "security"
        assert events[0].adjustment == -2
        assert events[0].reason == "Rejected for security (Not interested)"

    def test_explicit_category_alongside_derived(self, engine):
        events = engine.record_rejection(job(), "Too junior", category="security")
        assert {(e.category, e.adjustment) for e in events} == {("seniority", 2), ("security", -2)}

    def test_unknown_category_raises(self, engine):
        with pytest.raises(ValueError, match="Unknown scoring category"):
            engine.record_rejection(job(), "Too junior", category="no_such_category")
        assert engine.get_active_adjustments() == []

    def test_per_rejection_step_is_clipped(self, engine):
        """Several suggestions for one category still move it at most max_step."""
        reason = "Wrong tech stack, not our stack, different technology, unfamiliar with Go"
        events = engine.record_rejection(job(), reason)

        core_azure = [e for e in events if e.category == "core_azure"]
        assert len(core_azure) == 1
        assert core_azure[0].adjustment == -5

    def test_saturated_category_logs_no_event(self):
        """Changes below min_adjustment after clamping are skipped."""
        engine = RejectionLearningEngine(
            MemoryLearningStorage(), config=LearningConfig(weight_clamp=3, max_step=3)
        )
        counts = [len(engine.record_rejection(job(), "Too junior")) for _ in range(3)]

        assert counts == [1, 1, 0]
        assert engine.storage.get_weight_deltas()["seniority"] == 3

    def test_reason_without_signal_changes_nothing(self, engine):
        assert engine.record_rejection(job(), "Just not feeling it") == []
        assert engine.get_active_adjustments() == []

    def test_storage_failure_propagates(self):
        storage = MagicMock(spec=LearningStorage)
        storage.get_weight_deltas.side_effect = StorageError("unavailable")
        engine = RejectionLearningEngine(storage)

        with pytest.raises(StorageError):
            engine.record_rejection(job(), "Too junior")

    def test_concurrent_rejections_lose_no_updates(self, engine):
        """Twenty parallel rejections behave as if applied one after another."""

        def reject():
            engine.record_rejection(job(), "Too junior")

        threads = [threading.Thread(target=reject) for _ in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert engine.storage.get_weight_deltas()["seniority"] == 40
        assert len(engine.get_recent_learnings(100)) == 20
        assert engine.get_top_patterns()[0].count == 20


class TestAIAssistedLearning:
    """Test merging of AI analysis into learning."""

    def test_ai_filters_and_adjustments_are_applied(self, storage):
        provider = MagicMock()
        provider.generate.return_value = json.dumps(
            {
                "patterns": [{"type": "company", "value": "Initech", "confidence": 0.9}],
                "suggested_adjustments": [
                    {"category": "legacy_modernization", "adjustment": -3, "reason": "Legacy work"}
                ],
                "filters": [{"type": "block_company", "value": "Initech"}],
            }
        )
        engine = RejectionLearningEngine(storage, analyzer=RejectionAnalyzer(provider))

        events = engine.record_rejection(job(company="Initech"), "Too junior")

        assert {(e.category, e.adjustment) for e in events} == {
            ("legacy_modernization", -3),
            ("seniority", 2),
        }
        # pattern + filter suggestion both count towards the company pattern
        initech = [p for p in engine.get_top_patterns() if p.type == "company"]
        assert initech[0].value == "Initech"
        assert initech[0].count == 2
        assert engine.apply_filters(job(company="Initech")).filter_type == "CompanyBlocklist"

    def test_ai_failure_falls_back_to_keywords(self, storage):
        provider = MagicMock()
        provider.generate.side_effect = RuntimeError("API down")
        engine = RejectionLearningEngine(storage, analyzer=RejectionAnalyzer(provider))

        events = engine.record_rejection(job(), "Too junior")

        assert [(e.category, e.adjustment) for e in events] == [("seniority", 2)]


class TestLearnedFilters:
    """Test filters learned from rejection patterns."""

    def test_manual_company_filter(self, engine):
        """Manual filters are active immediately and only in the engine's chain."""
        pattern = engine.add_manual_filter("company", "Acme")
        assert pattern.count == 2

        verdict = engine.apply_filters(job())
        assert verdict.blocked is True
        assert verdict.filter_type == "CompanyBlocklist"
        assert "Acme" in verdict.reason

        assert apply_filters(job()).blocked is False

    def test_manual_filter_is_idempotent(self, engine):
        engine.add_manual_filter("keyword", "blockchain")
        pattern = engine.add_manual_filter("keyword", "blockchain")
        assert pattern.count == 2

    @pytest.mark.parametrize("pattern_type,value", [("salary", "100k"), ("company", "  ")])
    def test_manual_filter_rejects_bad_input(self, engine, pattern_type, value):
        with pytest.raises(ValueError):
            engine.add_manual_filter(pattern_type, value)

    def test_repeated_company_rejection_blocks_company(self, engine):
        engine.record_rejection(job(), "Acme again, no thanks")
        assert engine.apply_filters(job()).blocked is False

        engine.record_rejection(job(), "Acme again, no thanks")
        assert engine.apply_filters(job()).filter_type == "CompanyBlocklist"

    def test_junior_rejections_add_seniority_minimum(self, engine):
        engine.record_rejection(job(), "Too junior")
        engine.record_rejection(job(), "Not senior enough")

        verdict = engine.apply_filters(job(title="Junior Developer"))
        assert verdict.filter_type == "SeniorityMinimum"
        assert engine.apply_filters(job(title="Senior Developer")).blocked is False

    def test_static_filters_run_first(self, engine):
        engine.add_manual_filter("company", "Acme")
        verdict = engine.apply_filters(job(description="Hybrid role in Austin"))
        assert verdict.filter_type == "LocationRequirement"


class TestReads:
    """Test read-side views of learned state."""

    def test_top_patterns_tie_break_by_recency(self, engine):
        engine.record_rejection(job(), "Too junior")
        engine.record_rejection(job(), "Overqualified")
        assert engine.get_top_patterns()[0].value == "overqualified"

        engine.record_rejection(job(), "Too junior")
        top = engine.get_top_patterns()
        assert (top[0].value, top[0].count) == ("too junior", 2)

    def test_recent_learnings_most_recent_first(self, engine):
        engine.record_rejection(job(), "Too junior")
        engine.record_rejection(job(), "Not interested", category="devops")

        recent = engine.get_recent_learnings()
        assert [e.category for e in recent] == ["devops", "seniority"]
        assert [e.category for e in engine.get_recent_learnings(1)] == ["devops"]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limits_return_empty(self, engine, limit):
        engine.record_rejection(job(), "Too junior")
        assert engine.get_top_patterns(limit) == []
        assert engine.get_recent_learnings(limit) == []

    def test_filter_stats(self, engine):
        """Static hits and learned filter sources are ranked by count."""
        engine.record_rejection(job(description="Hybrid role in Dallas"), "Too junior")
        engine.record_rejection(
            job(description="Requires a Bachelor's degree in Computer Science"), "Too junior"
        )

        stats = [(s.type, s.count) for s in engine.get_filter_stats()]
        assert stats == [
            ("SeniorityMinimum", 2),
            ("EducationRequirement", 1),
            ("LocationRequirement", 1),
        ]

    def test_filter_stats_empty(self, engine):
        assert engine.get_filter_stats() == []

    def test_active_weights_sum_to_100(self, engine):
        engine.record_rejection(job(), "Too junior")
        weights = engine.get_active_weights("core")
        assert sum(weights.values()) == pytest.approx(100.0)

    def test_weight_summary(self, engine):
        engine.record_rejection(job(), "Too junior")
        summary = engine.get_weight_summary("core")

        assert summary["base_weights"]["seniority"] == 10
        assert summary["adjustments"] == {"seniority": 2}
        assert summary["total_adjustment"] == 2
        assert summary["validation"]["is_valid"] is True


class TestResets:
    """Test reset and clear operations."""

    def test_reset_weight_adjustments(self, engine):
        engine.record_rejection(job(), "Too junior")
        engine.reset_weight_adjustments()

        assert engine.get_active_adjustments() == []
        assert engine.get_recent_learnings() == []
        # patterns survive a weight reset
        assert engine.get_top_patterns() != []

    def test_clear_all_filters(self, engine):
        engine.add_manual_filter("company", "Acme")
        engine.record_rejection(job(description="Hybrid role"), "Too junior")
        engine.clear_all_filters()

        assert engine.get_top_patterns() == []
        assert engine.get_filter_stats() == []
        assert engine.apply_filters(job()).blocked is False

    def test_resets_are_idempotent(self, engine):
        for _ in range(2):
            engine.reset_weight_adjustments()
            engine.clear_all_filters()
            engine.clear_all_caches()
        assert engine.get_active_adjustments() == []
