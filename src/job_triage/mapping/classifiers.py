"""
Fallback label classifiers.

Used for labels the heuristic rules cannot resolve. Classifiers are async so
the mapper can bound each lookup with a timeout; results are best guesses
and stay below the heuristic confidence.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ValidationError
from rapidfuzz import fuzz

from job_triage.ai.providers import AIProvider, extract_json_text
from job_triage.mapping.vocabulary import CanonicalKey, LabelMapping

logger = logging.getLogger(__name__)


class LabelClassifier(ABC):
    """Fallback classifier interface."""

    @abstractmethod
    async def classify(self, label: str) -> LabelMapping:
        """
        Classify one label.

        Returns:
            Best-guess mapping, or an unknown mapping when nothing fits
        """


# Phrases a label may resemble, per key
EXEMPLARS: Dict[CanonicalKey, Tuple[str, ...]] = {
    CanonicalKey.FULL_NAME: ("full name", "candidate name", "applicant name", "preferred name"),
    CanonicalKey.FIRST_NAME: ("first name", "given name", "forename"),
    CanonicalKey.LAST_NAME: ("last name", "surname", "family name"),
    CanonicalKey.EMAIL: ("email address", "contact email"),
    CanonicalKey.PHONE: ("phone number", "cell number", "contact number"),
    CanonicalKey.CITY: ("city", "current city", "town", "city of residence", "where do you live"),
    CanonicalKey.WORK_AUTHORIZATION: (
        "authorized to work",
        "eligible to work",
        "right to work",
        "work permit",
        "employment eligibility",
    ),
    CanonicalKey.REQUIRES_SPONSORSHIP: ("require sponsorship", "visa status", "need a visa", "h1b visa"),
    CanonicalKey.YEARS_DOTNET: ("years of .net experience", "years of c# experience", "c# experience", "asp.net"),
    CanonicalKey.YEARS_AZURE: ("years of azure experience", "azure cloud", "azure certification"),
    CanonicalKey.LINKEDIN_URL: ("linkedin profile", "linkedin url"),
    CanonicalKey.SALARY_EXPECTATION: (
        "desired salary",
        "expected salary",
        "salary requirements",
        "desired compensation",
        "rate expectations",
    ),
    CanonicalKey.US_TIMEZONE: ("time zone", "working hours", "hours of availability"),
    CanonicalKey.WHY_FIT: (
        "why do you want to work here",
        "why this role",
        "motivation",
        "tell us about yourself",
    ),
}

_NON_WORD = re.compile(r"[^\w.#+]+")


def normalize_label(label: str) -> str:
    """Lowercase, drop punctuation (keeping . # +) and collapse whitespace."""
    return " ".join(_NON_WORD.sub(" ", (label or "").lower()).split())


def similarity(a: str, b: str) -> float:
    """
    Similarity in [0, 1]: mean of the token-set and token-sort ratios.

    Token-set alone scores any label containing a whole exemplar as a perfect
    match; the token-sort term penalises the extra words.
    """
    if not a or not b:
        return 0.0
    return (fuzz.token_set_ratio(a, b) + fuzz.token_sort_ratio(a, b)) / 200


class LexicalLabelClassifier(LabelClassifier):
    """
    Similarity against exemplar phrases.

    No network access; confidence is the similarity scaled into
    [0, max_confidence].
    """

    def __init__(
        self,
        exemplars: Optional[Dict[CanonicalKey, Tuple[str, ...]]] = None,
        threshold: float = 0.65,
        max_confidence: float = 0.8,
    ):
        self.exemplars = exemplars or EXEMPLARS
        self.threshold = threshold
        self.max_confidence = max_confidence

    def best_match(self, label: str) -> Tuple[CanonicalKey, float]:
        """Return the closest key and its similarity score."""
        text = normalize_label(label)
        best_key, best_score = CanonicalKey.UNKNOWN, 0.0
        for key, phrases in self.exemplars.items():
            for phrase in phrases:
                score = similarity(text, phrase)
                if score > best_score:
                    best_key, best_score = key, score
        return best_key, best_score

    async def classify(self, label: str) -> LabelMapping:
        key, score = self.best_match(label)
        if key is CanonicalKey.UNKNOWN or score < self.threshold:
            return LabelMapping.unknown(label)
        return LabelMapping(label=label, key=key, confidence=round(score * self.max_confidence, 2))


class MappingOutput(BaseModel):
    """Expected JSON answer from the model."""

    key: str


class LLMLabelClassifier(LabelClassifier):
    """
    Ask an AI provider which canonical key a label means.

    The provider call is blocking, so it runs in a worker thread. Answers
    outside the vocabulary become unknown.
    """

    def __init__(self, provider: AIProvider, confidence: float = 0.8):
        self.provider = provider
        self.confidence = confidence

    async def classify(self, label: str) -> LabelMapping:
        prompt = self._build_prompt(label)
        response = await asyncio.to_thread(
            self.provider.generate, prompt, max_tokens=100, temperature=0.1
        )

        try:
            output = MappingOutput.model_validate(json.loads(extract_json_text(response)))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Invalid label mapping response for '{label}': {str(e)}")
            return LabelMapping.unknown(label)

        key = CanonicalKey.parse(output.key)
        if key is CanonicalKey.UNKNOWN:
            return LabelMapping.unknown(label)
        return LabelMapping(label=label, key=key, confidence=self.confidence)

    @staticmethod
    def _build_prompt(label: str) -> str:
        keys: List[str] = [key.value for key in CanonicalKey.known()]
        return f"""You are a form field label analyzer. Map the label to a canonical key.

CANONICAL KEYS:
{", ".join(keys)}

RULES:
- Only use a canonical key if the label clearly matches that field
- If no good match exists, use "unknown"
- Be conservative - when in doubt, use "unknown"

LABEL: "{label}"

Return ONLY valid JSON in this exact format:
{{"key": "canonical_key"}}"""
