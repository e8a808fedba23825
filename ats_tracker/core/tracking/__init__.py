"""Application lifecycle: state machine, collaborators and orchestrator."""

from .events import CompositeEventSink, LoggingEventSink
from .interfaces import (
    ApplicationStore,
    EventSink,
    JobLookup,
    ResumeLookup,
    SkillCatalog,
)
from .state_machine import (
    ApplicationStateMachine,
    allowed_statuses,
    derive_stage_from_status,
    next_stage,
    validate_rating,
)
from .tracking_service import (
    ApplicationTrackingOrchestrator,
    BulkUpdateResult,
    ScreeningResults,
    TimelineView,
    get_tracking_orchestrator,
)

__all__ = [
    "CompositeEventSink",
    "LoggingEventSink",
    "ApplicationStore",
    "EventSink",
    "JobLookup",
    "ResumeLookup",
    "SkillCatalog",
    "ApplicationStateMachine",
    "allowed_statuses",
    "derive_stage_from_status",
    "next_stage",
    "validate_rating",
    "ApplicationTrackingOrchestrator",
    "BulkUpdateResult",
    "ScreeningResults",
    "TimelineView",
    "get_tracking_orchestrator",
]
