"""Fuzzy skill matching module."""

from .similarity import (
    levenshtein_distance,
    normalize_skill,
    normalize_skills,
    skill_similarity,
)
from .skill_matcher import (
    SkillMatcher,
    SkillMatchResult,
    get_skill_matcher,
)

__all__ = [
    "levenshtein_distance",
    "normalize_skill",
    "normalize_skills",
    "skill_similarity",
    "SkillMatcher",
    "SkillMatchResult",
    "get_skill_matcher",
]
