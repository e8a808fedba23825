"""
Tests for ats_tracker.cli — commands that run without a database.
"""

from typer.testing import CliRunner

from ats_tracker import __version__
from ats_tracker.cli import app

runner = CliRunner()


class TestVersionAndInfo:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_info_shows_screening_settings(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "testing" in result.stdout
        assert "0.70" in result.stdout


class TestMatchSkills:
    def test_match_report(self):
        result = runner.invoke(
            app,
            ["match-skills", "--candidate", "JavaScript, React", "--required", "javascript,node.js"],
        )
        assert result.exit_code == 0
        assert "Skill Match (50%)" in result.stdout
        assert "missing" in result.stdout
        assert "Missing key skills: node.js" in result.stdout

    def test_threshold_option(self):
        result = runner.invoke(
            app,
            ["match-skills", "-c", "postgres", "-r", "postgresql", "--threshold", "0.9"],
        )
        assert result.exit_code == 0
        assert "Skill Match (0%)" in result.stdout

    def test_threshold_out_of_range(self):
        result = runner.invoke(app, ["match-skills", "-c", "go", "-t", "2"])
        assert result.exit_code != 0


class TestInputValidation:
    def test_unknown_status_filter(self):
        result = runner.invoke(app, ["list-applications", "--status", "ghosted"])
        assert result.exit_code == 1
        assert "Invalid filters" in result.stdout

    def test_unknown_target_status(self):
        result = runner.invoke(app, ["set-status", "abc", "ghosted", "--actor", "r1"])
        assert result.exit_code == 1
        assert "Unknown status" in result.stdout
