"""Tests for configuration loading."""

import pytest
import yaml
from pydantic import ValidationError

from job_triage.config import ENV_OVERRIDES, LearningConfig, TriageConfig, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove overrides that would leak in from the environment."""
    for env_var in list(ENV_OVERRIDES) + ["JOB_TRIAGE_CONFIG"]:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    def write(data):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(data))
        return path

    return write


class TestLoadConfig:
    """Test YAML loading and defaults."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "missing.yaml", load_env=False)
        assert config == TriageConfig()
        assert config.learning.weight_clamp == 50
        assert config.mapping.fallback == "lexical"
        assert config.storage.backend == "memory"
        assert config.ai.enabled is False

    def test_reads_yaml(self, config_file):
        path = config_file({"learning": {"pattern_threshold": 3}, "mapping": {"fallback": "none"}})
        config = load_config(path, load_env=False)

        assert config.learning.pattern_threshold == 3
        assert config.learning.step == 2
        assert config.mapping.fallback == "none"

    def test_path_from_environment(self, config_file, monkeypatch):
        path = config_file({"storage": {"database_name": "portfolio"}})
        monkeypatch.setenv("JOB_TRIAGE_CONFIG", str(path))

        assert load_config(load_env=False).storage.database_name == "portfolio"

    def test_env_overrides(self, config_file, monkeypatch):
        path = config_file({"storage": {"backend": "memory"}})
        monkeypatch.setenv("STORAGE_BACKEND", "Firestore")
        monkeypatch.setenv("FIRESTORE_DATABASE", "Portfolio-Staging")
        monkeypatch.setenv("AI_PROVIDER", "OPENAI")

        config = load_config(path, load_env=False)

        assert config.storage.backend == "firestore"
        assert config.storage.database_name == "Portfolio-Staging"
        assert config.ai.provider == "openai"

    def test_invalid_values_raise(self, config_file):
        path = config_file({"mapping": {"fallback": "magic"}})
        with pytest.raises(ValidationError):
            load_config(path, load_env=False)


class TestLearningConfig:
    """Test learning tuning validation."""

    def test_max_step_cannot_exceed_clamp(self):
        with pytest.raises(ValidationError):
            LearningConfig(weight_clamp=3, max_step=5)

    def test_threshold_must_be_positive(self):
        with pytest.raises(ValidationError):
            LearningConfig(pattern_threshold=0)
