"""
Loguru setup for ATS Tracker.

Diagnostics go to stderr and, unless disabled, a rotating application log.
Lifecycle audit records carry ``audit_type`` in their extra data and are
also written to a separate audit file kept for longer.
"""

import sys
from typing import Any

from loguru import logger

from ats_tracker.utils.config import get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}:{line}</cyan> | <level>{message}</level>"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {extra[audit_type]} | {message}"

REDACTED = "***REDACTED***"
SENSITIVE_KEY_PARTS = (
    "password", "secret", "token", "api_key", "apikey",
    "auth", "credential", "private_key", "ssn",
)


def is_audit_record(record: dict[str, Any]) -> bool:
    return "audit_type" in record["extra"]


def setup_logging() -> None:
    """Replace loguru's default sink with the configured console, file and audit sinks."""
    settings = get_settings()
    log_settings = settings.logging
    # Local variables in tracebacks may hold applicant data
    diagnose = settings.debug and settings.environment == "development"

    logger.remove()
    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            diagnose=diagnose,
        )

    if not log_settings.file_output:
        return

    log_dir = log_settings.file_path.parent
    log_dir.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_settings.file_path,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        diagnose=diagnose,
        enqueue=True,
    )
    logger.add(
        log_dir / log_settings.audit_file_name,
        format=AUDIT_FORMAT,
        level="INFO",
        filter=is_audit_record,
        rotation=log_settings.rotation,
        retention=log_settings.audit_retention,
        enqueue=True,
    )


def get_logger(name: str) -> Any:
    """Logger bound to a module name (pass ``__name__``)."""
    return logger.bind(name=name)


def redact_sensitive(data: Any) -> Any:
    """Copy of ``data`` with values under credential-like keys masked, at any depth."""
    if isinstance(data, dict):
        return {
            key: REDACTED
            if any(part in str(key).lower() for part in SENSITIVE_KEY_PARTS)
            else redact_sensitive(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_sensitive(item) for item in data]
    return data


def audit_log(action: str, details: dict[str, Any], audit_type: str = "LIFECYCLE") -> None:
    """
    Write one audit record.

    Args:
        action: Event name, e.g. "application.created"
        details: Event payload; credential-like keys are redacted
        audit_type: Audit category (LIFECYCLE, SCREENING, ACCESS)
    """
    logger.bind(audit_type=audit_type).info(f"{action} | {redact_sensitive(details)}")


# Configure on import; keep loguru's default sink if the log directory is not writable
try:
    setup_logging()
except OSError as e:
    logger.warning(f"File logging unavailable, using default sink: {e}")
