"""Tests for rejection reason analysis."""

import json
from unittest.mock import MagicMock

import pytest

from job_triage.filters import JobPosting
from job_triage.learning.analyzer import (
    PatternMatch,
    RejectionAnalyzer,
    analyze_rejection,
    analyze_rejection_keywords,
    convert_patterns_to_adjustments,
    extract_company_from_rejection,
    extract_seniority_from_rejection,
    extract_tech_keywords,
)


def pairs(patterns):
    return [(p.type, p.value) for p in patterns]


class TestKeywordAnalysis:
    """Test phrase group matching."""

    def test_too_junior(self):
        assert pairs(analyze_rejection_keywords("Too junior")) == [("seniority", "too junior")]

    def test_multiple_groups(self):
        patterns = pairs(analyze_rejection_keywords("Not remote, and salary is too low"))
        assert ("location", "not remote") in patterns
        assert ("compensation", "salary") in patterns

    def test_whole_words_only(self):
        """'pay' must not match inside 'payments'."""
        assert analyze_rejection_keywords("Payments team, not for me") == []

    @pytest.mark.parametrize("reason", ["", None])
    def test_empty_reason(self, reason):
        assert analyze_rejection_keywords(reason) == []


class TestExtraction:
    """Test tech, company and seniority extraction."""

    def test_tech_keywords_respect_word_boundaries(self):
        assert extract_tech_keywords("Too much Java, not JavaScript") == ["Java", "JavaScript"]

    def test_tech_keywords_with_symbols(self):
        assert extract_tech_keywords("C++ and C# shop") == ["C++", "C#"]

    def test_favored_cloud_is_not_tech_mismatch(self):
        assert extract_tech_keywords("Azure role but mostly REST API work") == []

    def test_company_from_job(self):
        job = JobPosting(company="Acme")
        assert extract_company_from_rejection("Acme again, no thanks", job) == "Acme"

    def test_company_after_preposition(self):
        assert extract_company_from_rejection("Met the team from Globex Corporation") == "Globex Corporation"

    @pytest.mark.parametrize(
        "reason", ["Work from home is required", "Role at AWS", "Too much work from React"]
    )
    def test_company_rejects_noise(self, reason):
        assert extract_company_from_rejection(reason) is None

    @pytest.mark.parametrize(
        "reason,expected",
        [
            ("Too junior", "senior"),
            ("Not senior enough", "senior"),
            ("Overqualified for this", "mid"),
            ("Entry level role", "entry"),
            ("Wrong stack", None),
        ],
    )
    def test_seniority(self, reason, expected):
        assert extract_seniority_from_rejection(reason) == expected


class TestAdjustments:
    """Test pattern to weight change conversion."""

    def test_seniority_directions(self):
        adjustments = convert_patterns_to_adjustments(
            [PatternMatch(type="seniority", value="too junior"), PatternMatch(type="seniority", value="overqualified")]
        )
        assert [(a.category, a.adjustment) for a in adjustments] == [("seniority", 2), ("seniority", -2)]

    def test_frontend_tech_hits_frontend_category(self):
        adjustments = convert_patterns_to_adjustments(
            [PatternMatch(type="tech_stack", value="React"), PatternMatch(type="tech_stack", value="Java")]
        )
        assert [(a.category, a.adjustment) for a in adjustments] == [
            ("frontend_frameworks", -2),
            ("core_azure", -2),
        ]
        assert adjustments[0].reason == "Wrong tech stack - avoiding React"

    def test_remote_and_cost(self):
        analysis = analyze_rejection("Not remote and over our budget")
        assert [(a.category, a.adjustment) for a in analysis.suggested_adjustments] == [
            ("performance", 1),
            ("seniority", -1),
        ]

    def test_culture_carries_no_weight_change(self):
        analysis = analyze_rejection("Not a culture fit")
        assert pairs(analysis.patterns) == [("culture", "culture fit")]
        assert analysis.suggested_adjustments == []

    def test_full_analysis(self):
        analysis = analyze_rejection("Wrong tech stack, too much React", JobPosting(company="Initech"))

        assert ("tech_stack", "React") in pairs(analysis.patterns)
        categories = [a.category for a in analysis.suggested_adjustments]
        assert categories.count("core_azure") == 2
        assert "frontend_frameworks" in categories
        assert analysis.target_seniority is None


class TestRejectionAnalyzer:
    """Test AI-assisted analysis and its fallback."""

    def test_without_provider_is_keyword_analysis(self):
        assert RejectionAnalyzer().analyze("Too junior") == analyze_rejection("Too junior")

    def test_merges_ai_and_keyword_results(self):
        provider = MagicMock()
        provider.generate.return_value = "```json\n" + json.dumps(
            {
                "patterns": [{"type": "seniority", "value": "Too Junior", "confidence": 0.95}],
                "suggested_adjustments": [
                    {"category": "seniority", "adjustment": 4, "reason": "AI says more senior"},
                    {"category": "not_a_category", "adjustment": 1, "reason": "dropped"},
                    {"category": "core_net", "adjustment": 12, "reason": "clipped"},
                ],
                "filters": [{"type": "avoid_keyword", "value": "junior"}],
            }
        ) + "\n```"

        analysis = RejectionAnalyzer(provider).analyze("Too junior")

        # AI pattern wins over the keyword duplicate
        assert pairs(analysis.patterns) == [("seniority", "Too Junior")]
        assert [(a.category, a.adjustment) for a in analysis.suggested_adjustments] == [
            ("seniority", 4),
            ("core_net", 5),
        ]
        assert [(f.type, f.value) for f in analysis.filters] == [("avoid_keyword", "junior")]
        assert analysis.target_seniority == "senior"
        assert provider.generate.call_args.kwargs == {"max_tokens": 1000, "temperature": 0.1}

    @pytest.mark.parametrize("response", ["not json at all", '{"patterns": "nope"}'])
    def test_invalid_response_falls_back(self, response):
        provider = MagicMock()
        provider.generate.return_value = response

        assert RejectionAnalyzer(provider).analyze("Too junior") == analyze_rejection("Too junior")

    def test_provider_error_falls_back(self):
        provider = MagicMock()
        provider.generate.side_effect = RuntimeError("Claude API error: overloaded")

        assert RejectionAnalyzer(provider).analyze("Too junior") == analyze_rejection("Too junior")
