"""Auto-screening: experience arithmetic and composite scoring."""

from .experience import (
    experience_score,
    match_experience,
    required_years_for,
    role_years,
    total_experience_years,
)
from .screening_scorer import (
    ScreeningComponents,
    ScreeningOutcome,
    ScreeningScorer,
    get_screening_scorer,
)

__all__ = [
    "experience_score",
    "match_experience",
    "required_years_for",
    "role_years",
    "total_experience_years",
    "ScreeningComponents",
    "ScreeningOutcome",
    "ScreeningScorer",
    "get_screening_scorer",
]
