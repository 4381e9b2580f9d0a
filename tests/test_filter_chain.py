"""Tests for filter chain composition and learned filters."""

import pytest

from job_triage.filters import (
    CompanyBlocklistFilter,
    FilterChain,
    JobPosting,
    KeywordAvoidanceFilter,
    SeniorityMinimumFilter,
    TechStackFilter,
    build_pattern_filters,
    count_pattern_filter_sources,
    is_junior_signal,
)
from job_triage.learning.models import RejectionPattern


def pattern(pattern_type, value, count):
    return RejectionPattern(type=pattern_type, value=value, count=count)


class TestBuildPatternFilters:
    """Test learned filter construction from rejection patterns."""

    def test_below_threshold_builds_nothing(self):
        assert build_pattern_filters([pattern("company", "Acme", 1)]) == []

    def test_filters_in_fixed_order(self):
        filters = build_pattern_filters(
            [
                pattern("tech_stack", "React", 2),
                pattern("seniority", "too junior", 1),
                pattern("seniority", "not senior enough", 1),
                pattern("keyword", "blockchain", 3),
                pattern("company", "Acme", 2),
            ]
        )

        assert [type(f) for f in filters] == [
            CompanyBlocklistFilter,
            KeywordAvoidanceFilter,
            SeniorityMinimumFilter,
            TechStackFilter,
        ]

    def test_senior_phrases_do_not_add_minimum(self):
        assert build_pattern_filters([pattern("seniority", "overqualified", 5)]) == []

    def test_custom_threshold(self):
        filters = build_pattern_filters([pattern("company", "Acme", 1)], threshold=1)
        assert len(filters) == 1

    def test_count_sources(self):
        counts = count_pattern_filter_sources(
            [
                pattern("company", "Acme", 2),
                pattern("company", "Initech", 4),
                pattern("company", "Globex", 1),
                pattern("seniority", "too junior", 3),
                pattern("keyword", "blockchain", 1),
            ]
        )
        assert counts == {"CompanyBlocklist": 6, "SeniorityMinimum": 3}

    def test_junior_signal(self):
        assert is_junior_signal("Too Junior")
        assert is_junior_signal("need more experience")
        assert not is_junior_signal("overqualified")


class TestLearnedFilterBehaviour:
    """Test how learned filters match jobs."""

    def test_company_match_is_case_insensitive(self):
        verdict = CompanyBlocklistFilter(["acme"]).evaluate(JobPosting(company="ACME"))
        assert verdict.blocked is True
        assert verdict.reason == "Company is on blocklist due to previous rejections (ACME)"

    def test_keyword_word_boundaries(self):
        """'Java' must not match 'JavaScript'."""
        tech = TechStackFilter(["Java"])
        assert tech.evaluate(JobPosting(description="JavaScript and TypeScript")).blocked is False
        assert tech.evaluate(JobPosting(title="Java Developer")).blocked is True

    def test_symbol_terms(self):
        assert KeywordAvoidanceFilter(["c++"]).evaluate(JobPosting(description="Modern C++ role")).blocked

    def test_seniority_minimum(self):
        senior = SeniorityMinimumFilter("senior")
        assert senior.evaluate(JobPosting(title="Jr. Engineer")).blocked is True
        assert senior.evaluate(JobPosting(title="Staff Engineer")).blocked is False

    @pytest.mark.parametrize(
        "title,blocked",
        [
            ("Senior Internal Tools Engineer", False),
            ("International Payments Lead", False),
            ("Software Engineering Intern", True),
            ("Entry-Level Developer", True),
            ("Jr Developer", True),
        ],
    )
    def test_seniority_markers_match_whole_words(self, title, blocked):
        assert SeniorityMinimumFilter("senior").evaluate(JobPosting(title=title)).blocked is blocked


class TestFilterChain:
    """Test chain composition."""

    def test_default_chain_order(self):
        assert [f.filter_type for f in FilterChain.default().filters] == [
            "LocationRequirement",
            "EducationRequirement",
            "CloudProviderBias",
        ]

    def test_extended_does_not_mutate(self):
        chain = FilterChain.default()
        extended = chain.extended([CompanyBlocklistFilter(["Acme"])])

        assert len(chain) == 3
        assert len(extended) == 4
        assert extended.evaluate({"company": "Acme"}).filter_type == "CompanyBlocklist"

    def test_test_filters(self):
        results = FilterChain.default().test_filters(
            [
                {"title": "Dev", "description": "Fully remote"},
                {"title": "Dev", "description": "Hybrid role"},
            ]
        )
        assert [r["blocked"] for r in results] == [False, True]
        assert results[0]["reason"] is None
