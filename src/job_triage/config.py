"""
Configuration loading.

Settings come from a YAML file (``config/config.yaml`` by default, or the path
in ``JOB_TRIAGE_CONFIG``), then environment variables override individual
values. A missing file means defaults; invalid values raise pydantic's
ValidationError.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"


class LearningConfig(BaseModel):
    """Rejection learning tuning."""

    weight_clamp: float = Field(default=50.0, gt=0, description="Maximum |delta| per category")
    step: float = Field(default=2.0, gt=0, description="Delta for an explicit category")
    max_step: float = Field(default=5.0, gt=0, description="Maximum change per rejection")
    min_adjustment: float = Field(default=0.5, ge=0, description="Smaller changes are skipped")
    pattern_threshold: int = Field(default=2, ge=1, description="Count that activates a filter")

    @model_validator(mode="after")
    def _check_bounds(self) -> "LearningConfig":
        if self.max_step > self.weight_clamp:
            raise ValueError("max_step cannot exceed weight_clamp")
        return self


class MappingConfig(BaseModel):
    """Label mapper settings."""

    fallback: Literal["lexical", "llm", "none"] = "lexical"
    fallback_timeout_seconds: float = Field(default=5.0, gt=0)
    cache_min_confidence: float = Field(default=0.7, ge=0.0, le=1.0)


class StorageConfig(BaseModel):
    """Learning state persistence."""

    backend: Literal["memory", "firestore"] = "memory"
    database_name: str = "job-triage"
    credentials_path: Optional[str] = None


class AIConfig(BaseModel):
    """AI provider used by LLM-backed analysis and label classification."""

    enabled: bool = False
    provider: Literal["claude", "openai"] = "claude"
    model: Optional[str] = None
    timeout_seconds: float = Field(default=30.0, gt=0)


class TriageConfig(BaseModel):
    """Top-level configuration."""

    learning: LearningConfig = Field(default_factory=LearningConfig)
    mapping: MappingConfig = Field(default_factory=MappingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    ai: AIConfig = Field(default_factory=AIConfig)


# env var -> (section, field)
ENV_OVERRIDES = {
    "STORAGE_BACKEND": ("storage", "backend"),
    "FIRESTORE_DATABASE": ("storage", "database_name"),
    "GOOGLE_APPLICATION_CREDENTIALS": ("storage", "credentials_path"),
    "AI_PROVIDER": ("ai", "provider"),
    "LABEL_FALLBACK": ("mapping", "fallback"),
}

CASE_SENSITIVE_FIELDS = {"database_name", "credentials_path"}


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_var, (section, field) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            if field not in CASE_SENSITIVE_FIELDS:
                value = value.strip().lower()
            data.setdefault(section, {})[field] = value
    return data


def load_config(config_path: Union[str, Path, None] = None, load_env: bool = True) -> TriageConfig:
    """
    Load configuration from YAML and the environment.

    Args:
        config_path: YAML path; defaults to $JOB_TRIAGE_CONFIG or config/config.yaml
        load_env: Load a .env file first

    Returns:
        Validated TriageConfig

    Raises:
        pydantic.ValidationError: If a value is invalid
        yaml.YAMLError: If the file is not valid YAML
    """
    if load_env:
        load_dotenv()

    path = Path(config_path or os.getenv("JOB_TRIAGE_CONFIG", DEFAULT_CONFIG_PATH))

    data: Dict[str, Any] = {}
    if path.exists():
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.debug(f"Loaded configuration from {path}")
    else:
        logger.info(f"Config file {path} not found, using defaults")

    return TriageConfig.model_validate(_apply_env_overrides(data))
