"""
Rejection reason analysis.

Turns a free-text rejection reason into recurring patterns and suggested
weight changes. Keyword analysis is deterministic and always available; an
optional AI provider can add patterns the keyword tables miss.
"""

import json
import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from job_triage.ai.providers import AIProvider, extract_json_text
from job_triage.filters.models import JobPosting
from job_triage.learning.models import SuggestedAdjustment
from job_triage.profiles import SCORING_CATEGORIES

logger = logging.getLogger(__name__)

KEYWORD_CONFIDENCE = 0.8

# Phrase groups matched against the lowercased reason (whole words only)
REJECTION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "seniority": (
        "too junior",
        "not senior enough",
        "junior level",
        "entry level",
        "mid level",
        "not enough experience",
        "need more experience",
        "lack experience",
        "too senior",
        "overqualified",
    ),
    "tech_mismatch": (
        "wrong stack",
        "wrong tech",
        "different tech",
        "different technology",
        "different framework",
        "tech stack",
        "technology stack",
        "not our stack",
        "not familiar with",
        "unfamiliar with",
        "no experience with",
        "no knowledge of",
    ),
    "location": (
        "location",
        "not remote",
        "office required",
        "requires office",
        "office work",
        "in office",
        "onsite",
        "on-site",
        "must be in",
        "relocation",
        "geographic",
        "time zone",
        "timezone",
    ),
    "compensation": (
        "salary",
        "compensation",
        "pay",
        "budget",
        "too expensive",
        "over budget",
        "over our budget",
        "salary range",
        "salary expectations",
        "budget constraints",
    ),
    "culture": (
        "company culture",
        "culture fit",
        "cultural fit",
        "team fit",
        "not a fit",
        "company values",
        "team dynamics",
        "work environment",
    ),
}

JUNIOR_PHRASES = (
    "too junior",
    "not senior enough",
    "junior level",
    "entry level",
    "mid level",
    "not enough experience",
    "need more experience",
    "lack experience",
)
SENIOR_PHRASES = ("too senior", "overqualified")
REMOTE_PHRASES = (
    "not remote",
    "office required",
    "requires office",
    "office work",
    "in office",
    "onsite",
    "on-site",
)
COST_PHRASES = ("too expensive", "over budget", "over our budget", "budget constraints")

# lowercase match -> display name; generic terms (api, rest) and the favored cloud are left out
TECH_TERMS: Dict[str, str] = {
    "python": "Python",
    "java": "Java",
    "javascript": "JavaScript",
    "typescript": "TypeScript",
    "react": "React",
    "angular": "Angular",
    "vue": "Vue",
    "node.js": "Node.js",
    "spring": "Spring",
    "django": "Django",
    "flask": "Flask",
    "ruby": "Ruby",
    "rails": "Rails",
    "php": "PHP",
    "golang": "Go",
    "rust": "Rust",
    "scala": "Scala",
    "c++": "C++",
    "c#": "C#",
    "kubernetes": "Kubernetes",
    "docker": "Docker",
    "aws": "AWS",
    "gcp": "GCP",
    "mongodb": "MongoDB",
    "postgresql": "PostgreSQL",
    "mysql": "MySQL",
    "redis": "Redis",
    "elasticsearch": "Elasticsearch",
    "kafka": "Kafka",
    "rabbitmq": "RabbitMQ",
    "graphql": "GraphQL",
}

FRONTEND_TECH = frozenset({"React", "Angular", "Vue", "JavaScript", "TypeScript"})

_STOPWORDS = {"the", "this", "that", "our", "their", "home", "night", "all", "least"}
_COMPANY_PATTERN = re.compile(r"\b(?:at|from)\s+([A-Z][\w&.-]*(?:\s+[A-Z][\w&.-]*)*)")


def _phrase_regex(phrase: str) -> re.Pattern:
    return re.compile(r"(?<![\w#+.])" + re.escape(phrase) + r"(?![\w#+])", re.IGNORECASE)


_KEYWORD_REGEXES = {
    group: [(phrase, _phrase_regex(phrase)) for phrase in phrases]
    for group, phrases in REJECTION_KEYWORDS.items()
}
_TECH_REGEXES = [(display, _phrase_regex(term)) for term, display in TECH_TERMS.items()]


class PatternMatch(BaseModel):
    """One pattern found in a rejection reason."""

    type: str
    value: str
    confidence: float = Field(default=KEYWORD_CONFIDENCE, ge=0.0, le=1.0)


class SuggestedFilter(BaseModel):
    """Filter suggested by AI analysis (block_company or avoid_keyword)."""

    type: str
    value: str


class RejectionAnalysis(BaseModel):
    """Everything learned from one rejection reason."""

    patterns: List[PatternMatch] = Field(default_factory=list)
    suggested_adjustments: List[SuggestedAdjustment] = Field(default_factory=list)
    filters: List[SuggestedFilter] = Field(default_factory=list)
    target_seniority: Optional[str] = None


def analyze_rejection_keywords(reason: str) -> List[PatternMatch]:
    """
    Match a rejection reason against the keyword phrase groups.

    Args:
        reason: Free-text rejection reason

    Returns:
        One PatternMatch per matched phrase, in group order
    """
    if not reason:
        return []

    patterns = []
    for group, phrases in _KEYWORD_REGEXES.items():
        for phrase, regex in phrases:
            if regex.search(reason):
                patterns.append(PatternMatch(type=group, value=phrase))
    return patterns


def extract_tech_keywords(reason: str) -> List[str]:
    """Return technology names mentioned in a rejection reason, in display casing."""
    if not reason:
        return []
    return [display for display, regex in _TECH_REGEXES if regex.search(reason)]


def extract_company_from_rejection(reason: str, job: Optional[JobPosting] = None) -> Optional[str]:
    """
    Find the company a rejection reason is about.

    The job's own company wins when the reason names it; otherwise a
    capitalised name after "at"/"from" is used.
    """
    if not reason:
        return None

    if job is not None and job.company:
        if _phrase_regex(job.company).search(reason):
            return job.company

    for match in _COMPANY_PATTERN.finditer(reason):
        candidate = match.group(1).strip(" .,-")
        lowered = candidate.lower()
        if len(candidate) > 3 and lowered not in _STOPWORDS and lowered not in TECH_TERMS:
            return candidate
    return None


def extract_seniority_from_rejection(reason: str) -> Optional[str]:
    """Return the seniority level the user is looking for ("senior", "mid", "entry") if implied."""
    lower_reason = (reason or "").lower()

    if "too junior" in lower_reason or "not senior enough" in lower_reason:
        return "senior"
    if "too senior" in lower_reason or "overqualified" in lower_reason:
        return "mid"
    if "entry level" in lower_reason or "junior" in lower_reason:
        return "entry"
    return None


def convert_patterns_to_adjustments(patterns: Iterable[PatternMatch]) -> List[SuggestedAdjustment]:
    """
    Map patterns to weight changes.

    - too junior: seniority +2
    - too senior / overqualified: seniority -2
    - tech mismatch or named tech: frontend_frameworks -2 for frontend tech, else core_azure -2
    - not remote / office required: performance +1
    - too expensive / over budget: seniority -1

    Other patterns (culture, company, keyword) carry no weight change.
    """
    adjustments = []

    for pattern in patterns:
        value = pattern.value.lower()

        if pattern.type == "seniority":
            if value in JUNIOR_PHRASES:
                adjustments.append(
                    SuggestedAdjustment(
                        category="seniority",
                        adjustment=2,
                        reason="Too junior - prioritizing more senior jobs",
                    )
                )
            elif value in SENIOR_PHRASES:
                adjustments.append(
                    SuggestedAdjustment(
                        category="seniority",
                        adjustment=-2,
                        reason="Too senior - considering mid-level jobs",
                    )
                )

        elif pattern.type == "tech_mismatch":
            adjustments.append(
                SuggestedAdjustment(
                    category="core_azure",
                    adjustment=-2,
                    reason=f"Wrong tech stack - avoiding '{pattern.value}' roles",
                )
            )

        elif pattern.type == "tech_stack":
            category = "frontend_frameworks" if pattern.value in FRONTEND_TECH else "core_azure"
            adjustments.append(
                SuggestedAdjustment(
                    category=category,
                    adjustment=-2,
                    reason=f"Wrong tech stack - avoiding {pattern.value}",
                )
            )

        elif pattern.type == "location" and value in REMOTE_PHRASES:
            adjustments.append(
                SuggestedAdjustment(
                    category="performance",
                    adjustment=1,
                    reason="Location issue - prioritizing remote jobs",
                )
            )

        elif pattern.type == "compensation" and value in COST_PHRASES:
            adjustments.append(
                SuggestedAdjustment(
                    category="seniority",
                    adjustment=-1,
                    reason="Compensation issue - considering mid-level roles",
                )
            )

    return adjustments


def analyze_rejection(reason: str, job: Optional[JobPosting] = None) -> RejectionAnalysis:
    """Keyword-only analysis: phrase groups, tech names and company."""
    patterns = analyze_rejection_keywords(reason)
    patterns.extend(PatternMatch(type="tech_stack", value=tech) for tech in extract_tech_keywords(reason))

    company = extract_company_from_rejection(reason, job)
    if company:
        patterns.append(PatternMatch(type="company", value=company))

    return RejectionAnalysis(
        patterns=patterns,
        suggested_adjustments=convert_patterns_to_adjustments(patterns),
        target_seniority=extract_seniority_from_rejection(reason),
    )


class RejectionAnalyzer:
    """
    Rejection analysis with optional AI assistance.

    Without a provider this is plain keyword analysis. With one, the model's
    patterns, adjustments and filter suggestions are merged with the keyword
    results; any provider or parsing failure falls back to keywords only.
    """

    def __init__(self, provider: Optional[AIProvider] = None):
        self.provider = provider

    def analyze(self, reason: str, job: Optional[JobPosting] = None) -> RejectionAnalysis:
        keyword_analysis = analyze_rejection(reason, job)
        if self.provider is None:
            return keyword_analysis

        try:
            llm_analysis = self._analyze_with_llm(reason, job)
        except Exception as e:
            logger.error(f"AI rejection analysis failed, using keyword analysis: {str(e)}")
            return keyword_analysis

        return self._merge(llm_analysis, keyword_analysis)

    def _analyze_with_llm(self, reason: str, job: Optional[JobPosting]) -> RejectionAnalysis:
        prompt = self._build_prompt(reason, job)
        response = self.provider.generate(prompt, max_tokens=1000, temperature=0.1)

        try:
            data = json.loads(extract_json_text(response))
            analysis = RejectionAnalysis(
                patterns=data.get("patterns", []),
                suggested_adjustments=data.get("suggested_adjustments", []),
                filters=data.get("filters", []),
            )
        except (json.JSONDecodeError, ValidationError, AttributeError) as e:
            logger.debug(f"Response was: {response[:500] if response else 'None'}...")
            raise ValueError(f"Invalid rejection analysis response: {str(e)}") from e

        # Drop categories the scorer does not know and clip to the allowed range
        analysis.suggested_adjustments = [
            adj.model_copy(update={"adjustment": max(-5.0, min(5.0, adj.adjustment))})
            for adj in analysis.suggested_adjustments
            if adj.category in SCORING_CATEGORIES
        ]
        return analysis

    @staticmethod
    def _merge(llm: RejectionAnalysis, keyword: RejectionAnalysis) -> RejectionAnalysis:
        patterns = list(llm.patterns)
        seen = {(p.type, p.value.lower()) for p in patterns}
        for pattern in keyword.patterns:
            if (pattern.type, pattern.value.lower()) not in seen:
                patterns.append(pattern)
                seen.add((pattern.type, pattern.value.lower()))

        adjustments = list(llm.suggested_adjustments)
        suggested_categories = {adj.category for adj in adjustments}
        for adjustment in keyword.suggested_adjustments:
            if adjustment.category not in suggested_categories:
                adjustments.append(adjustment)

        return RejectionAnalysis(
            patterns=patterns,
            suggested_adjustments=adjustments,
            filters=llm.filters,
            target_seniority=keyword.target_seniority,
        )

    @staticmethod
    def _build_prompt(reason: str, job: Optional[JobPosting]) -> str:
        job_line = f"{job.title} at {job.company}" if job else "N/A"
        categories = ", ".join(SCORING_CATEGORIES)
        return f"""Analyze this job rejection reason and identify patterns to avoid similar jobs.

REJECTION REASON: "{reason}"
JOB: {job_line}

1. PATTERNS: specific patterns in the reason. Types: seniority, tech_stack,
   location, compensation, culture, company, keyword.

2. ADJUSTMENTS: weight changes for scoring categories.
   Available categories: {categories}
   Adjustment range: -5 to +5 percentage points.
   - "Too junior" / "not enough experience" -> INCREASE seniority
   - "Too senior" / "overqualified" -> DECREASE seniority
   - "Wrong tech stack" -> DECREASE that technology's category
   - "Missing skill" -> INCREASE that skill's category

3. FILTERS: ways to avoid similar jobs. Types: block_company, avoid_keyword.

Return ONLY JSON in this format:
{{
  "patterns": [{{"type": "seniority", "value": "too junior", "confidence": 0.9}}],
  "suggested_adjustments": [{{"category": "seniority", "adjustment": 2, "reason": "Too junior - prioritize senior jobs"}}],
  "filters": [{{"type": "avoid_keyword", "value": "junior"}}]
}}"""
