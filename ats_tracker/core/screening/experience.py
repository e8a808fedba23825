"""
Experience-duration arithmetic for screening.

Total years are summed per role as (end or now) minus start. A current
role always counts as at least one year.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from ats_tracker.data.models import ExperienceMatch, ResumeExperience, to_naive_utc, utc_now
from ats_tracker.utils.constants import (
    DAYS_PER_YEAR,
    EXPERIENCE_LEVEL_YEARS,
    EXPERIENCE_SCORE_BANDS,
    EXPERIENCE_SCORE_FLOOR,
)


def role_years(role: ResumeExperience, now: Optional[datetime] = None) -> float:
    """Duration of a single role in years."""
    now = to_naive_utc(now or utc_now())
    end = role.end_date or now
    years = max(0.0, (end - role.start_date).total_seconds() / 86400 / DAYS_PER_YEAR)
    if role.current:
        years = max(1.0, years)
    return years


def total_experience_years(
    roles: Iterable[ResumeExperience], now: Optional[datetime] = None
) -> float:
    """Sum of all role durations in years."""
    now = now or utc_now()
    return sum(role_years(role, now) for role in roles)


def required_years_for(level: Optional[str]) -> Optional[int]:
    """Years implied by an experience level, or None when unspecified/unknown."""
    if not level:
        return None
    return EXPERIENCE_LEVEL_YEARS.get(str(getattr(level, "value", level)).lower())


def experience_score(candidate_years: float, level: Optional[str]) -> int:
    """
    Score candidate years against a required level.

    100 when the requirement is met, then 80/60/40 at 80%/60%/40% of it,
    else 20. An unspecified level is no requirement.
    """
    required = required_years_for(level)
    if not required:
        return 100

    for fraction, score in EXPERIENCE_SCORE_BANDS:
        if candidate_years >= required * fraction:
            return score
    return EXPERIENCE_SCORE_FLOOR


def match_experience(
    roles: Iterable[ResumeExperience],
    level: Optional[str],
    now: Optional[datetime] = None,
) -> ExperienceMatch:
    """Build the experience sub-document for screening data."""
    years = total_experience_years(roles, now)
    level_value = getattr(level, "value", level) if level else None
    return ExperienceMatch(
        required=level_value or "Not specified",
        candidate=f"{round(years)} years",
        candidate_years=round(years, 2),
        required_years=required_years_for(level_value),
        score=experience_score(years, level_value),
    )
