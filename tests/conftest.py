"""Shared fixtures."""

import pytest

from job_triage.filters.models import JobPosting
from job_triage.learning.engine import RejectionLearningEngine
from job_triage.storage.memory import MemoryLearningStorage


@pytest.fixture
def storage():
    """Fresh in-memory learning storage."""
    return MemoryLearningStorage()


@pytest.fixture
def engine(storage):
    """Engine over fresh storage; state is reset after each test."""
    engine = RejectionLearningEngine(storage)
    yield engine
    engine.reset_weight_adjustments()
    engine.clear_all_filters()
    engine.clear_all_caches()


@pytest.fixture
def remote_job():
    """Job that passes every static filter."""
    return JobPosting(
        title="Senior .NET Developer",
        company="Test Corp",
        description="Fully remote role. 5+ years of experience with C# and .NET",
        profile="core",
    )
