"""
ATS Tracker - application tracking and auto-screening engine.

Moves job applications through a controlled status/stage lifecycle with an
append-only timeline, and scores candidates against job requirements using
fuzzy skill matching.
"""

from ats_tracker.utils.constants import APP_NAME, VERSION

__app_name__ = APP_NAME
__version__ = VERSION
