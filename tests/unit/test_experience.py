"""
Tests for ats_tracker.core.screening.experience — years of experience and bands.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ats_tracker.core.screening import (
    experience_score,
    match_experience,
    required_years_for,
    role_years,
    total_experience_years,
)
from ats_tracker.data.models import ResumeExperience
from ats_tracker.utils.constants import ExperienceLevel


NOW = datetime(2024, 6, 1, 12, 0, 0)


def _role(years_ago: float, years_long=None, current=False):
    start = NOW - timedelta(days=365 * years_ago)
    end = None if years_long is None else start + timedelta(days=365 * years_long)
    return ResumeExperience(start_date=start, end_date=end, current=current)


# ── role_years / total_experience_years ─────────────────────────────────────


class TestRoleYears:
    def test_closed_role(self):
        assert role_years(_role(6, years_long=2), NOW) == pytest.approx(2.0)

    def test_open_role_runs_until_now(self):
        assert role_years(_role(3), NOW) == pytest.approx(3.0)

    def test_current_role_counts_at_least_one_year(self):
        assert role_years(_role(30 / 365, current=True), NOW) == 1.0

    def test_aware_dates(self):
        role = ResumeExperience(start_date=datetime(2021, 6, 1, 12, tzinfo=timezone.utc), current=True)
        assert role_years(role, NOW) == pytest.approx(3.0, abs=0.01)
        assert role_years(role, NOW.replace(tzinfo=timezone.utc)) == pytest.approx(3.0, abs=0.01)

    def test_long_current_role_not_capped(self):
        assert role_years(_role(4, current=True), NOW) == pytest.approx(4.0)

    def test_total_sums_roles(self):
        roles = [_role(8, years_long=3), _role(4, current=True)]
        assert total_experience_years(roles, NOW) == pytest.approx(7.0)

    def test_no_roles(self):
        assert total_experience_years([], NOW) == 0.0


# ── required_years_for ──────────────────────────────────────────────────────


class TestRequiredYears:
    @pytest.mark.parametrize(
        "level, years",
        [("entry", 0), ("junior", 1), ("mid", 3), ("senior", 5), ("lead", 7), ("executive", 10)],
    )
    def test_level_table(self, level, years):
        assert required_years_for(level) == years

    def test_accepts_enum(self):
        assert required_years_for(ExperienceLevel.SENIOR) == 5

    def test_unspecified(self):
        assert required_years_for(None) is None
        assert required_years_for("wizard") is None


# ── experience_score ────────────────────────────────────────────────────────


class TestExperienceScore:
    def test_five_years_against_mid(self):
        assert experience_score(5, "mid") == 100

    def test_five_years_against_senior(self):
        assert experience_score(5, "senior") == 100

    def test_five_years_against_lead(self):
        assert experience_score(5, "lead") == 60

    @pytest.mark.parametrize(
        "years, expected",
        [(3.0, 100), (2.5, 80), (2.0, 60), (1.5, 40), (1.0, 20), (0.0, 20)],
    )
    def test_bands_against_mid(self, years, expected):
        assert experience_score(years, "mid") == expected

    def test_unspecified_level_is_no_penalty(self):
        assert experience_score(0, None) == 100

    def test_entry_level_is_no_penalty(self):
        assert experience_score(0, "entry") == 100


# ── match_experience ────────────────────────────────────────────────────────


class TestMatchExperience:
    def test_builds_sub_document(self):
        match = match_experience([_role(5)], ExperienceLevel.SENIOR, NOW)
        assert match.required == "senior"
        assert match.required_years == 5
        assert match.candidate == "5 years"
        assert match.candidate_years == pytest.approx(5.0)
        assert match.score == 100

    def test_unspecified_level(self):
        match = match_experience([], None, NOW)
        assert match.required == "Not specified"
        assert match.required_years is None
        assert match.score == 100
