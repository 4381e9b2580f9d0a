"""LLM providers used by the fallback label classifier and rejection analysis."""
from job_triage.ai.providers import (
    AIProvider,
    AITask,
    ClaudeProvider,
    OpenAIProvider,
    create_provider,
    extract_json_text,
    get_model_for_task,
)

__all__ = [
    "AIProvider",
    "AITask",
    "ClaudeProvider",
    "OpenAIProvider",
    "create_provider",
    "extract_json_text",
    "get_model_for_task",
]
