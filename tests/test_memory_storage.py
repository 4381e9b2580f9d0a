"""Tests for in-memory learning storage."""

import threading

from job_triage.learning.models import LabelMappingRecord, RejectionLearningEvent


class TestWeightsAndEvents:
    """Test weight deltas and the event log."""

    def test_weight_deltas_are_copied(self, storage):
        storage.set_weight_delta("seniority", 2.0)
        snapshot = storage.get_weight_deltas()
        snapshot["seniority"] = 99

        assert storage.get_weight_deltas() == {"seniority": 2.0}

    def test_events_most_recent_first(self, storage):
        for category in ("security", "devops", "seniority"):
            storage.append_learning_event(
                RejectionLearningEvent(category=category, adjustment=1.0, reason="r")
            )

        assert [e.category for e in storage.get_learning_events(2)] == ["seniority", "devops"]

    def test_reset(self, storage):
        storage.set_weight_delta("seniority", 2.0)
        storage.append_learning_event(RejectionLearningEvent(category="seniority", adjustment=2.0, reason="r"))
        storage.reset_weight_deltas()
        storage.clear_learning_events()

        assert storage.get_weight_deltas() == {}
        assert storage.get_learning_events(10) == []


class TestPatterns:
    """Test rejection pattern counters."""

    def test_increment_accumulates(self, storage):
        storage.increment_pattern("company", "Acme")
        pattern = storage.increment_pattern("company", "Acme", amount=2)

        assert pattern.count == 3
        assert pattern.last_seen is not None

    def test_order_by_count_then_recency(self, storage):
        storage.increment_pattern("keyword", "a")
        storage.increment_pattern("keyword", "b")
        storage.increment_pattern("keyword", "c", amount=3)

        assert [p.value for p in storage.get_patterns()] == ["c", "b", "a"]
        assert [p.value for p in storage.get_patterns(limit=1)] == ["c"]

    def test_concurrent_increments(self, storage):
        def bump():
            for _ in range(50):
                storage.increment_pattern("seniority", "too junior")

        threads = [threading.Thread(target=bump) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert storage.get_patterns()[0].count == 400


class TestFilterHitsAndLabels:
    """Test filter hit counters and the label cache."""

    def test_filter_hits(self, storage):
        storage.increment_filter_hit("LocationRequirement")
        storage.increment_filter_hit("LocationRequirement")
        assert storage.get_filter_hits() == {"LocationRequirement": 2}

        storage.clear_filter_hits()
        assert storage.get_filter_hits() == {}

    def test_label_mappings(self, storage):
        record = LabelMappingRecord(label="home town", key="city", confidence=0.8)
        storage.save_label_mapping(record)

        assert storage.get_label_mapping("home town") == record
        assert storage.get_label_mapping("unknown label") is None

        storage.clear_label_mappings()
        assert storage.get_label_mapping("home town") is None
