"""Event sinks for application lifecycle notifications."""

from typing import Any

from ats_tracker.utils.logger import audit_log, get_logger

logger = get_logger(__name__)


class LoggingEventSink:
    """Writes every event to the audit log."""

    def __init__(self, audit_type: str = "LIFECYCLE"):
        self.audit_type = audit_type

    def publish(self, event: str, payload: dict[str, Any]) -> None:
        audit_log(event, payload, audit_type=self.audit_type)


class CompositeEventSink:
    """Fans an event out to several sinks; one failing sink does not stop the rest."""

    def __init__(self, *sinks: Any):
        self.sinks = list(sinks)

    def publish(self, event: str, payload: dict[str, Any]) -> None:
        for sink in self.sinks:
            try:
                sink.publish(event, payload)
            except Exception as e:
                logger.warning(f"Event sink {type(sink).__name__} failed for {event}: {e}")
