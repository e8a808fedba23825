"""
Shared utilities: settings, lifecycle constants and loguru logging.
"""

from ats_tracker.utils.config import (
    AppSettings,
    ScreeningSettings,
    get_settings,
    reload_settings,
    settings,
)
from ats_tracker.utils.constants import (
    APP_NAME,
    VERSION,
    ApplicationEvent,
    ApplicationSource,
    ApplicationStage,
    ApplicationStatus,
    ExperienceLevel,
    JobStatus,
    TimelineAction,
)
from ats_tracker.utils.logger import audit_log, get_logger, setup_logging

__all__ = [
    "AppSettings",
    "ScreeningSettings",
    "get_settings",
    "reload_settings",
    "settings",
    "APP_NAME",
    "VERSION",
    "ApplicationEvent",
    "ApplicationSource",
    "ApplicationStage",
    "ApplicationStatus",
    "ExperienceLevel",
    "JobStatus",
    "TimelineAction",
    "audit_log",
    "get_logger",
    "setup_logging",
]
