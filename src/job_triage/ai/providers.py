"""AI provider abstractions for different LLM services."""

import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional

from anthropic import Anthropic
from openai import OpenAI


class AITask(str, Enum):
    """Work the engine asks an LLM to do."""

    LABEL_MAPPING = "label_mapping"
    REJECTION_ANALYSIS = "rejection_analysis"


class ModelTier(str, Enum):
    """Cost/quality tier of a model."""

    FAST = "fast"
    SMART = "smart"


# Label mapping is short and latency-bound; rejection analysis benefits from reasoning
TASK_MODEL_TIERS: Dict[AITask, ModelTier] = {
    AITask.LABEL_MAPPING: ModelTier.FAST,
    AITask.REJECTION_ANALYSIS: ModelTier.SMART,
}

MODEL_CATALOG: Dict[str, Dict[ModelTier, str]] = {
    "claude": {
        ModelTier.FAST: "claude-3-5-haiku-20241022",
        ModelTier.SMART: "claude-3-5-sonnet-20241022",
    },
    "openai": {
        ModelTier.FAST: "gpt-4o-mini",
        ModelTier.SMART: "gpt-4o",
    },
}


def get_model_for_task(provider_type: str, task: AITask) -> str:
    """
    Pick the model for a task.

    Raises:
        ValueError: If provider_type is not supported.
    """
    models = MODEL_CATALOG.get(provider_type.lower())
    if models is None:
        raise ValueError(
            f"Unsupported AI provider: {provider_type}. Supported providers: claude, openai"
        )
    return models[TASK_MODEL_TIERS[task]]


class AIProvider(ABC):
    """Abstract base class for AI providers."""

    model: str

    @abstractmethod
    def generate(self, prompt: str, max_tokens: int = 1000, temperature: float = 0.7) -> str:
        """
        Generate a response from the AI model.

        Args:
            prompt: The prompt to send to the model.
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature (0.0 to 1.0).

        Returns:
            The generated text response.
        """
        pass


class ClaudeProvider(AIProvider):
    """Anthropic Claude provider."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "claude-3-5-haiku-20241022",
        timeout: float = 30.0,
    ):
        """
        Initialize Claude provider.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var).
            model: Model identifier.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError(
                "Anthropic API key must be provided or set in ANTHROPIC_API_KEY environment variable"
            )

        self.model = model
        self.client = Anthropic(api_key=self.api_key, timeout=timeout)

    def generate(self, prompt: str, max_tokens: int = 1000, temperature: float = 0.7) -> str:
        """Generate a response using Claude."""
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.content[0].text
        except Exception as e:
            raise RuntimeError(f"Claude API error: {str(e)}") from e


class OpenAIProvider(AIProvider):
    """OpenAI GPT provider."""

    def __init__(
        self, api_key: Optional[str] = None, model: str = "gpt-4o-mini", timeout: float = 30.0
    ):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key (defaults to OPENAI_API_KEY env var).
            model: Model identifier.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "OpenAI API key must be provided or set in OPENAI_API_KEY environment variable"
            )

        self.model = model
        self.client = OpenAI(api_key=self.api_key, timeout=timeout)

    def generate(self, prompt: str, max_tokens: int = 1000, temperature: float = 0.7) -> str:
        """Generate a response using GPT."""
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            raise RuntimeError(f"OpenAI API error: {str(e)}") from e


def create_provider(
    provider_type: str,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    task: Optional[AITask] = None,
    timeout: float = 30.0,
) -> AIProvider:
    """
    Factory function to create AI provider instances.

    Args:
        provider_type: Type of provider ('claude', 'openai').
        api_key: Optional API key (otherwise uses environment variable).
        model: Optional model name; overrides task-based selection.
        task: Optional task used to pick a model tier.
        timeout: Request timeout in seconds.

    Returns:
        AIProvider instance.

    Raises:
        ValueError: If provider_type is not supported.
    """
    provider_type = provider_type.lower()

    if model is None and task is not None:
        model = get_model_for_task(provider_type, task)

    kwargs = {"api_key": api_key, "timeout": timeout}
    if model:
        kwargs["model"] = model

    if provider_type == "claude":
        return ClaudeProvider(**kwargs)

    elif provider_type == "openai":
        return OpenAIProvider(**kwargs)

    else:
        raise ValueError(
            f"Unsupported AI provider: {provider_type}. Supported providers: claude, openai"
        )


def extract_json_text(response: str) -> str:
    """
    Strip markdown code fences around a JSON answer.

    Models often wrap JSON in ```json ... ``` blocks even when asked not to.
    """
    response_clean = response.strip()
    if "```json" in response_clean:
        start = response_clean.find("```json") + 7
        end = response_clean.find("```", start)
        response_clean = response_clean[start:end].strip()
    elif "```" in response_clean:
        start = response_clean.find("```") + 3
        end = response_clean.find("```", start)
        response_clean = response_clean[start:end].strip()
    return response_clean
