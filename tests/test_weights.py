"""Tests for effective weight computation."""

import pytest

from job_triage.learning.weights import (
    MIN_WEIGHT,
    compute_active_weights,
    normalize_weights,
    validate_weights,
)
from job_triage.profiles import DEFAULT_WEIGHTS, get_base_weights


class TestNormalizeWeights:
    """Test proportional normalisation."""

    def test_already_normalised_is_unchanged(self):
        weights = {"a": 60.0, "b": 40.0}
        assert normalize_weights(weights) == weights

    def test_scales_to_100(self):
        result = normalize_weights({"a": 30.0, "b": 10.0})
        assert result == {"a": 75.0, "b": 25.0}

    def test_all_zero_is_unchanged(self):
        assert normalize_weights({"a": 0.0, "b": 0.0}) == {"a": 0.0, "b": 0.0}


class TestComputeActiveWeights:
    """Test base weights plus deltas."""

    def test_no_deltas_keeps_base(self):
        base = get_base_weights("core")
        assert compute_active_weights(base, {}) == pytest.approx(base)

    def test_positive_delta_increases_share(self):
        base = get_base_weights("core")
        active = compute_active_weights(base, {"seniority": 10})

        assert sum(active.values()) == pytest.approx(100.0)
        assert active["seniority"] > base["seniority"]
        assert active["core_azure"] < base["core_azure"]

    def test_floor_for_positive_base(self):
        active = compute_active_weights({"a": 5.0, "b": 95.0}, {"a": -50})
        assert active["a"] == pytest.approx(MIN_WEIGHT / (MIN_WEIGHT + 95.0) * 100)

    def test_zero_base_stays_zero_unless_lifted(self):
        active = compute_active_weights(DEFAULT_WEIGHTS, {"devops": -10})
        assert active["devops"] == 0.0

        lifted = compute_active_weights(DEFAULT_WEIGHTS, {"devops": 10})
        assert lifted["devops"] > 0


class TestValidateWeights:
    """Test weight sanity checks."""

    def test_valid(self):
        assert validate_weights(get_base_weights("core")) == {"is_valid": True, "issues": []}

    def test_reports_issues(self):
        result = validate_weights({"a": 60.0, "b": -5.0})
        assert result["is_valid"] is False
        assert len(result["issues"]) == 3
