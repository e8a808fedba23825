"""
Tests for ats_tracker.core.matching.skill_matcher — fuzzy skill classification.
"""

import pytest

from ats_tracker.core.matching import SkillMatcher
from ats_tracker.data.models import SkillsMatch


# ── match ───────────────────────────────────────────────────────────────────


class TestMatch:
    def test_exact_and_missing(self, skill_matcher):
        result = skill_matcher.match(["JavaScript", "React"], ["javascript", "node.js"])
        assert result.matched == ["javascript"]
        assert result.matches[0].confidence == 1.0
        assert result.matches[0].matched_skill == "javascript"
        assert result.missing == ["node.js"]
        assert result.additional == ["react"]
        assert result.score == 50

    def test_both_empty_is_full_match(self, skill_matcher):
        result = skill_matcher.match([], [])
        assert result.score == 100
        assert result.matched == []
        assert result.missing == []
        assert result.additional == []

    def test_no_requirements_is_full_match(self, skill_matcher):
        result = skill_matcher.match(["Python"], [])
        assert result.score == 100
        assert result.additional == ["python"]

    def test_no_candidate_skills(self, skill_matcher):
        result = skill_matcher.match([], ["Python", "SQL"])
        assert result.score == 0
        assert result.missing == ["python", "sql"]

    def test_substring_match_counts(self, skill_matcher):
        result = skill_matcher.match(["Postgres"], ["PostgreSQL"])
        assert result.matched == ["postgresql"]
        assert result.matches[0].confidence == 0.8

    def test_below_threshold_is_additional(self, skill_matcher):
        result = skill_matcher.match(["Java"], ["Rust"])
        assert result.missing == ["rust"]
        assert result.additional == ["java"]

    def test_duplicates_do_not_double_count(self, skill_matcher):
        result = skill_matcher.match(
            ["Python", "python", "PYTHON"], ["Python", "python", "Go"]
        )
        assert result.required == ["python", "go"]
        assert result.matched == ["python"]
        assert result.score == 50

    def test_best_candidate_wins(self, skill_matcher):
        result = skill_matcher.match(["typescrpt", "typescript"], ["TypeScript"])
        assert result.matches[0].matched_skill == "typescript"
        assert result.additional == ["typescrpt"]

    def test_earliest_candidate_wins_ties(self, skill_matcher):
        # both contain "sql" and score 0.8
        result = skill_matcher.match(["mysql", "nosql"], ["sql"])
        assert result.matches[0].matched_skill == "mysql"

    def test_one_candidate_can_satisfy_several(self, skill_matcher):
        result = skill_matcher.match(["react"], ["react", "react native"])
        assert result.matched == ["react", "react native"]
        assert result.additional == []

    def test_catalog_tags_categories(self, skill_matcher):
        result = skill_matcher.match(
            ["python", "docker"],
            ["Python", "Docker"],
            catalog={"Python": "programming_languages"},
        )
        categories = {m.skill: m.category for m in result.matches}
        assert categories == {"python": "programming_languages", "docker": None}

    def test_configurable_threshold(self):
        strict = SkillMatcher(threshold=0.9)
        assert strict.match(["postgres"], ["postgresql"]).missing == ["postgresql"]

    def test_threshold_out_of_range(self):
        with pytest.raises(ValueError):
            SkillMatcher(threshold=1.5)


# ── recommendations ─────────────────────────────────────────────────────────


class TestRecommendations:
    def test_excellent_band(self, skill_matcher):
        result = skill_matcher.match(["python"], ["python"])
        assert result.recommendations[0].startswith("Excellent skill match")

    def test_good_band(self, skill_matcher):
        result = skill_matcher.match(["a1", "b2", "c3"], ["a1", "b2", "c3", "zz9", "yy8"])
        assert result.score == 60
        assert result.recommendations[0].startswith("Good skill match")

    def test_moderate_band(self, skill_matcher):
        result = skill_matcher.match(["python", "sql"], ["python", "sql", "go", "rust", "java"])
        assert result.score == 40
        assert result.recommendations[0].startswith("Moderate skill match")

    def test_low_band(self, skill_matcher):
        result = skill_matcher.match([], ["python"])
        assert result.recommendations[0].startswith("Low skill match")

    def test_callouts_limited_to_three(self, skill_matcher):
        result = skill_matcher.match(
            ["w1", "x2", "y3", "z4"], ["aaa", "bbb", "ccc", "ddd"]
        )
        assert "Missing key skills: aaa, bbb, ccc" in result.recommendations
        assert "Additional valuable skills: w1, x2, y3" in result.recommendations

    def test_no_callouts_when_empty(self, skill_matcher):
        result = skill_matcher.match(["python"], ["python"])
        assert len(result.recommendations) == 1


# ── to_skills_match ─────────────────────────────────────────────────────────


class TestToSkillsMatch:
    def test_converts_to_embedded_model(self, skill_matcher):
        result = skill_matcher.match(["Python", "React"], ["python", "go"])
        embedded = result.to_skills_match()
        assert isinstance(embedded, SkillsMatch)
        assert embedded.matched == ["python"]
        assert embedded.missing == ["go"]
        assert embedded.additional == ["react"]
        assert embedded.score == 50
        assert embedded.matches[0].confidence == 1.0
