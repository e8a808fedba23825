"""
Tests for ats_tracker.core.matching.similarity — normalization and edit distance.
"""

import pytest

from ats_tracker.core.matching import (
    levenshtein_distance,
    normalize_skill,
    normalize_skills,
    skill_similarity,
)


# ── normalize_skill / normalize_skills ──────────────────────────────────────


class TestNormalize:
    def test_lowercases_and_trims(self):
        assert normalize_skill("  PostgreSQL ") == "postgresql"

    def test_inner_whitespace_kept(self):
        assert normalize_skill(" Machine  Learning ") == "machine  learning"

    def test_dedupes_after_normalization(self):
        assert normalize_skills(["Python", "python ", "PYTHON", "Go"]) == ["python", "go"]

    def test_keeps_first_occurrence_order(self):
        assert normalize_skills(["React", "Angular", "react"]) == ["react", "angular"]

    def test_drops_blank_entries(self):
        assert normalize_skills(["", "   ", "SQL"]) == ["sql"]


# ── levenshtein_distance ────────────────────────────────────────────────────


class TestLevenshteinDistance:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("kitten", "sitting", 3),
            ("flaw", "lawn", 2),
            ("", "abc", 3),
            ("abc", "", 3),
            ("same", "same", 0),
            ("a", "b", 1),
        ],
    )
    def test_known_distances(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected

    def test_symmetric(self):
        assert levenshtein_distance("golang", "go") == levenshtein_distance("go", "golang")


# ── skill_similarity ────────────────────────────────────────────────────────


class TestSkillSimilarity:
    def test_identical_is_one(self):
        assert skill_similarity("python", "python") == 1.0

    def test_containment_is_fixed(self):
        assert skill_similarity("react", "react native") == 0.8
        assert skill_similarity("postgresql", "postgres") == 0.8

    def test_containment_short_circuits_edit_distance(self):
        # "c" inside "scala" would score 0.2 by edit distance alone
        assert skill_similarity("c", "scala") == 0.8

    def test_edit_distance_ratio(self):
        # one substitution over six characters
        assert skill_similarity("kotlin", "kotlen") == pytest.approx(1 - 1 / 6)

    def test_unrelated_is_low(self):
        assert skill_similarity("java", "rust") < 0.5

    def test_empty_string_is_zero(self):
        assert skill_similarity("", "python") == 0.0

    def test_bounded(self):
        for a, b in [("aws", "gcp"), ("terraform", "ansible"), ("x", "yyyyyyyy")]:
            assert 0.0 <= skill_similarity(a, b) <= 1.0
