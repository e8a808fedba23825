"""
Auto-screening scorer.

Combines the skill match, experience match, resume-quality estimate and
application completeness into one 0-100 composite. Components that are not
available are left out of both the weighted sum and the weight total, so
the composite is renormalized over what is known.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ats_tracker.core.matching import SkillMatcher, SkillMatchResult, get_skill_matcher
from ats_tracker.data.models import (
    Application,
    ExperienceMatch,
    Job,
    Resume,
    ScreeningData,
    utc_now,
)
from ats_tracker.utils.config import get_settings
from ats_tracker.utils.constants import COMPLETENESS_MAX, COMPLETENESS_POINTS
from ats_tracker.utils.logger import get_logger

from .experience import match_experience

logger = get_logger(__name__)

# Upper bound of each component's raw value
COMPONENT_SCALE: dict[str, float] = {
    "skills": 100.0,
    "experience": 100.0,
    "resume_quality": 100.0,
    "completeness": float(COMPLETENESS_MAX),
}


@dataclass
class ScreeningComponents:
    """Raw component values; None means unavailable."""

    skills: Optional[float] = None
    experience: Optional[float] = None
    resume_quality: Optional[float] = None
    completeness: Optional[float] = None

    def available(self) -> dict[str, float]:
        return {
            name: value
            for name, value in (
                ("skills", self.skills),
                ("experience", self.experience),
                ("resume_quality", self.resume_quality),
                ("completeness", self.completeness),
            )
            if value is not None
        }


@dataclass
class ScreeningOutcome:
    """Everything produced by one screening run."""

    score: int
    components: ScreeningComponents
    skills: Optional[SkillMatchResult] = None
    experience: Optional[ExperienceMatch] = None
    screened_at: datetime = field(default_factory=utc_now)

    def apply_to(self, screening_data: ScreeningData) -> ScreeningData:
        """
        Return screening data carrying this outcome.

        Candidate-supplied salary expectation and availability are kept.
        Sub-results that were unavailable in this run keep their old value.
        """
        update: dict[str, Any] = {
            "auto_screening_score": self.score,
            "screened_at": self.screened_at,
        }
        if self.skills is not None:
            update["skills_match"] = self.skills.to_skills_match()
        if self.experience is not None:
            update["experience_match"] = self.experience
        return screening_data.model_copy(update=update)


class ScreeningScorer:
    """
    Computes sub-scores and the weighted composite.

    Default weights are skills 40, experience 30, resume quality 20,
    completeness 10; override them through ``SCREENING_*_WEIGHT``.
    """

    def __init__(
        self,
        weights: Optional[Mapping[str, float]] = None,
        skill_matcher: Optional[SkillMatcher] = None,
    ):
        self.weights = dict(weights or get_settings().screening.weights)
        unknown = set(self.weights) - set(COMPONENT_SCALE)
        if unknown:
            raise ValueError(f"Unknown screening components: {sorted(unknown)}")
        self.skill_matcher = skill_matcher or get_skill_matcher()

    # -------------------------------------------------------------------------
    # Sub-scores
    # -------------------------------------------------------------------------

    @staticmethod
    def completeness_score(application: Application) -> int:
        """+5 cover letter, +3 questionnaire, +2 attachments, capped at 10."""
        score = 0
        if application.cover_letter and application.cover_letter.strip():
            score += COMPLETENESS_POINTS["cover_letter"]
        if application.form_data.questionnaire:
            score += COMPLETENESS_POINTS["questionnaire"]
        if application.form_data.attachments:
            score += COMPLETENESS_POINTS["attachments"]
        return min(score, COMPLETENESS_MAX)

    @staticmethod
    def resume_quality_score(resume: Optional[Resume]) -> Optional[float]:
        if resume is None:
            return None
        return resume.estimated_ats_score

    # -------------------------------------------------------------------------
    # Composite
    # -------------------------------------------------------------------------

    def composite(self, components: ScreeningComponents) -> int:
        """Weighted composite over available components, rounded half up, in [0, 100]."""
        weighted = 0.0
        total_weight = 0.0
        for name, value in components.available().items():
            weight = self.weights.get(name, 0.0)
            if weight <= 0:
                continue
            normalized = min(max(value / COMPONENT_SCALE[name], 0.0), 1.0)
            weighted += weight * normalized
            total_weight += weight

        if total_weight == 0:
            return 0
        score = math.floor(weighted / total_weight * 100 + 0.5)
        return max(0, min(100, score))

    def screen(
        self,
        application: Application,
        job: Optional[Job],
        resume: Optional[Resume],
        catalog: Optional[Mapping[str, Optional[str]]] = None,
        now: Optional[datetime] = None,
    ) -> ScreeningOutcome:
        """
        Screen an application against its job.

        Args:
            application: The application being screened
            job: Target job, or None when the job lookup failed
            resume: Linked resume, or None when there is none or lookup failed
            catalog: Optional skill name to category mapping
            now: Reference time for ongoing roles

        Returns:
            ScreeningOutcome with the composite and the sub-results
        """
        now = now or utc_now()
        skills_result: Optional[SkillMatchResult] = None
        experience: Optional[ExperienceMatch] = None

        if job is not None and resume is not None:
            skills_result = self.skill_matcher.match(
                resume.skill_names, job.skills_required, catalog
            )
            experience = match_experience(resume.experience, job.experience_level, now)

        components = ScreeningComponents(
            skills=skills_result.score if skills_result else None,
            experience=experience.score if experience else None,
            resume_quality=self.resume_quality_score(resume),
            completeness=self.completeness_score(application),
        )
        score = self.composite(components)

        logger.debug(
            f"Screened application {application.id}: score={score}, "
            f"components={components.available()}"
        )
        return ScreeningOutcome(
            score=score,
            components=components,
            skills=skills_result,
            experience=experience,
            screened_at=now,
        )

    def score_existing(
        self, application: Application, resume: Optional[Resume] = None
    ) -> int:
        """Composite from the sub-results already stored on the application."""
        data = application.screening_data
        components = ScreeningComponents(
            skills=data.skills_match.score if data.skills_match else None,
            experience=data.experience_match.score if data.experience_match else None,
            resume_quality=self.resume_quality_score(resume),
            completeness=self.completeness_score(application),
        )
        return self.composite(components)

    # -------------------------------------------------------------------------
    # Reviewer guidance
    # -------------------------------------------------------------------------

    @staticmethod
    def recommendations(application: Application, score: Optional[int]) -> list[str]:
        """Guidance shown alongside screening results."""
        data = application.screening_data
        notes: list[str] = []

        if score is not None and score >= 80:
            notes.append("Strong candidate - recommend proceeding to interview")
        elif score is not None and score >= 60:
            notes.append("Good candidate - consider phone screening")
        else:
            notes.append("Review candidate profile carefully before proceeding")

        if data.skills_match and data.skills_match.missing:
            notes.append(f"Missing key skills: {', '.join(data.skills_match.missing)}")
        if data.experience_match and data.experience_match.score < 60:
            notes.append("Experience level may not meet requirements")
        if application.rating is not None and application.rating >= 4:
            notes.append("Highly rated by reviewers")
        return notes


# Singleton instance
_screening_scorer: Optional[ScreeningScorer] = None


def get_screening_scorer() -> ScreeningScorer:
    """Get the screening scorer configured from settings."""
    global _screening_scorer
    if _screening_scorer is None:
        _screening_scorer = ScreeningScorer()
    return _screening_scorer
