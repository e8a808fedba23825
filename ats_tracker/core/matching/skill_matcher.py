"""
Fuzzy skill matcher.

Classifies a candidate's declared skills against a job's required skills
into matched, missing and additional, with a per-match confidence, an
aggregate 0-100 score and short recommendations.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Optional

from ats_tracker.data.models import SkillMatchDetail, SkillsMatch
from ats_tracker.utils.config import get_settings
from ats_tracker.utils.constants import (
    RECOMMENDATION_CALLOUT_LIMIT,
    SKILL_MATCH_BANDS,
)
from ats_tracker.utils.logger import get_logger

from .similarity import normalize_skill, normalize_skills, skill_similarity

logger = get_logger(__name__)


@dataclass
class SkillMatchResult:
    """Outcome of matching one candidate skill list against one job."""

    required: list[str] = field(default_factory=list)
    candidate: list[str] = field(default_factory=list)
    matches: list[SkillMatchDetail] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    additional: list[str] = field(default_factory=list)
    score: float = 0.0
    recommendations: list[str] = field(default_factory=list)

    @property
    def matched(self) -> list[str]:
        """Required skills that were satisfied."""
        return [m.skill for m in self.matches]

    def to_skills_match(self) -> SkillsMatch:
        """Convert to the embedded screening sub-document."""
        return SkillsMatch(
            required=list(self.required),
            matched=self.matched,
            missing=list(self.missing),
            additional=list(self.additional),
            score=self.score,
            matches=list(self.matches),
            recommendations=list(self.recommendations),
        )


class SkillMatcher:
    """
    Matches free-text skill names using edit-distance similarity.

    A required skill is matched by the most similar candidate skill when
    that similarity reaches the threshold (0.70 by default). The first
    candidate skill wins ties. One candidate skill may satisfy several
    required skills.
    """

    def __init__(self, threshold: Optional[float] = None):
        """
        Args:
            threshold: Minimum similarity for a match. Defaults to the
                configured ``screening.skill_match_threshold``.
        """
        if threshold is None:
            threshold = get_settings().screening.skill_match_threshold
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"Threshold must be between 0 and 1, got {threshold}")
        self.threshold = threshold

    def match(
        self,
        candidate_skills: Iterable[str],
        required_skills: Iterable[str],
        catalog: Optional[Mapping[str, Optional[str]]] = None,
    ) -> SkillMatchResult:
        """
        Match candidate skills against required skills.

        Args:
            candidate_skills: Skill names declared by the candidate
            required_skills: Skill names the job requires
            catalog: Optional mapping of skill name to category, used to tag
                matched skills

        Returns:
            SkillMatchResult with classification, score and recommendations
        """
        candidates = normalize_skills(candidate_skills)
        required = normalize_skills(required_skills)
        categories = _normalize_catalog(catalog)

        result = SkillMatchResult(required=required, candidate=candidates)
        consumed: set[str] = set()

        for skill in required:
            best_skill, best_score = self._best_match(skill, candidates)
            if best_skill is not None and best_score >= self.threshold:
                consumed.add(best_skill)
                result.matches.append(
                    SkillMatchDetail(
                        skill=skill,
                        matched_skill=best_skill,
                        confidence=round(best_score, 4),
                        category=categories.get(skill),
                    )
                )
            else:
                result.missing.append(skill)

        result.additional = [s for s in candidates if s not in consumed]

        if required:
            result.score = round(len(result.matches) / len(required) * 100, 2)
        else:
            result.score = 100.0

        result.recommendations = self.recommendations(result)

        logger.debug(
            f"Skill match: {len(result.matches)}/{len(required)} matched, "
            f"score={result.score}"
        )
        return result

    def _best_match(
        self, required_skill: str, candidates: list[str]
    ) -> tuple[Optional[str], float]:
        """Most similar candidate skill; earliest candidate wins ties."""
        best_skill: Optional[str] = None
        best_score = 0.0
        for candidate in candidates:
            score = skill_similarity(candidate, required_skill)
            if score > best_score:
                best_skill, best_score = candidate, score
                if score == 1.0:
                    break
        return best_skill, best_score

    @staticmethod
    def recommendations(result: SkillMatchResult) -> list[str]:
        """Band verdict plus call-outs of the top missing and additional skills."""
        score = result.score
        if score >= SKILL_MATCH_BANDS["excellent"]:
            notes = ["Excellent skill match - strong candidate"]
        elif score >= SKILL_MATCH_BANDS["good"]:
            notes = ["Good skill match - consider for interview"]
        elif score >= SKILL_MATCH_BANDS["moderate"]:
            notes = ["Moderate skill match - review carefully"]
        else:
            notes = ["Low skill match - may not meet requirements"]

        if result.missing:
            top = result.missing[:RECOMMENDATION_CALLOUT_LIMIT]
            notes.append(f"Missing key skills: {', '.join(top)}")
        if result.additional:
            top = result.additional[:RECOMMENDATION_CALLOUT_LIMIT]
            notes.append(f"Additional valuable skills: {', '.join(top)}")
        return notes


def _normalize_catalog(
    catalog: Optional[Mapping[str, Optional[str]]],
) -> dict[str, Optional[str]]:
    if not catalog:
        return {}
    return {normalize_skill(name): category for name, category in catalog.items() if name}


# Singleton instance
_skill_matcher: Optional[SkillMatcher] = None


def get_skill_matcher() -> SkillMatcher:
    """Get the skill matcher configured from settings."""
    global _skill_matcher
    if _skill_matcher is None:
        _skill_matcher = SkillMatcher()
    return _skill_matcher
