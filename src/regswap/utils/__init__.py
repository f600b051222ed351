"""Logging, activity log and retry helpers."""
from .retry import with_retry, RETRYABLE_EXCEPTIONS
from .logging_config import (
    setup_logging,
    timed,
    timed_section,
    perf_logger,
)
from .audit_log import (
    OperationRecord,
    setup_audit_logging,
    log_operation,
    get_recent_operations,
)

__all__ = [
    "with_retry",
    "RETRYABLE_EXCEPTIONS",
    "setup_logging",
    "timed",
    "timed_section",
    "perf_logger",
    "OperationRecord",
    "setup_audit_logging",
    "log_operation",
    "get_recent_operations",
]
