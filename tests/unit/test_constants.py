"""
Tests for ats_tracker.utils.constants — lifecycle tables and scoring constants.
"""

from ats_tracker.utils.constants import (
    DEFAULT_SCREENING_WEIGHTS,
    DEFAULT_SKILL_MATCH_THRESHOLD,
    EXPERIENCE_LEVEL_YEARS,
    STAGE_PIPELINE,
    STATUS_TRANSITIONS,
    SUBSTRING_SIMILARITY,
    TERMINAL_STATUSES,
    ApplicationStage,
    ApplicationStatus,
    ExperienceLevel,
)


# ── ApplicationStatus ───────────────────────────────────────────────────────


class TestApplicationStatus:
    def test_terminal_flags(self):
        terminal = {s for s in ApplicationStatus if s.is_terminal}
        assert terminal == {
            ApplicationStatus.HIRED,
            ApplicationStatus.REJECTED,
            ApplicationStatus.WITHDRAWN,
        }

    def test_terminal_set_matches_values(self):
        assert TERMINAL_STATUSES == {"hired", "rejected", "withdrawn"}

    def test_every_status_in_table(self):
        assert set(STATUS_TRANSITIONS) == set(ApplicationStatus)

    def test_open_statuses_can_reject(self):
        for status, successors in STATUS_TRANSITIONS.items():
            if not status.is_terminal:
                assert ApplicationStatus.REJECTED in successors


# ── ApplicationStage ────────────────────────────────────────────────────────


class TestStagePipeline:
    def test_covers_every_stage_once(self):
        assert sorted(STAGE_PIPELINE) == sorted(ApplicationStage)
        assert len(set(STAGE_PIPELINE)) == len(STAGE_PIPELINE)

    def test_order(self):
        assert [s.value for s in STAGE_PIPELINE] == [
            "screening",
            "phone_screen",
            "technical",
            "onsite",
            "final",
            "offer",
            "hired",
        ]


# ── scoring constants ───────────────────────────────────────────────────────


class TestScoringConstants:
    def test_weights_sum_to_hundred(self):
        assert sum(DEFAULT_SCREENING_WEIGHTS.values()) == 100

    def test_threshold_defaults(self):
        assert DEFAULT_SKILL_MATCH_THRESHOLD == 0.70
        assert SUBSTRING_SIMILARITY == 0.8

    def test_every_level_has_years(self):
        assert set(EXPERIENCE_LEVEL_YEARS) == {level.value for level in ExperienceLevel}
