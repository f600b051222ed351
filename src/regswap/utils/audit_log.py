"""Activity log for profile operations.

Every save, load, delete and rename is appended to audit.log as one JSON
line so the user can see what happened to their registry and when.
"""
import json
import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

AUDIT_FILE_NAME = "audit.log"

# Create dedicated audit logger
audit_logger = logging.getLogger("regswap.audit")
audit_logger.propagate = False


def setup_audit_logging(log_dir: Path) -> Path:
    """Configure audit logging to <log_dir>/audit.log.

    Returns:
        Path of the audit log file
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    audit_file = log_dir / AUDIT_FILE_NAME

    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()

    handler = RotatingFileHandler(
        audit_file,
        maxBytes=2 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    # Raw JSON lines
    handler.setFormatter(logging.Formatter("%(message)s"))
    audit_logger.addHandler(handler)
    audit_logger.propagate = False

    return audit_file


@dataclass
class OperationRecord:
    """Record of one profile operation."""
    timestamp: str
    operation: str  # save_profile, load_profile, delete_live_keys, ...
    profile: Optional[str]
    status: str
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=None, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "OperationRecord":
        data = json.loads(json_str)
        return cls(**data)


def log_operation(
    operation: str,
    status: str,
    profile: Optional[str] = None,
    succeeded: Optional[list[str]] = None,
    failed: Optional[list[str]] = None,
    error: Optional[str] = None,
) -> OperationRecord:
    """Append an operation to the audit log.

    Returns:
        The OperationRecord that was logged
    """
    record = OperationRecord(
        timestamp=datetime.now(timezone.utc).isoformat(),
        operation=operation,
        profile=profile,
        status=status,
        succeeded=list(succeeded or []),
        failed=list(failed or []),
        error=error,
    )
    audit_logger.info(record.to_json())
    return record


def get_recent_operations(
    log_file: Path,
    operation: Optional[str] = None,
    limit: int = 20,
) -> list[OperationRecord]:
    """Read recent operations from the audit log.

    Args:
        log_file: Path to audit.log
        operation: Filter by operation name
        limit: Maximum number of records to return

    Returns:
        List of OperationRecords, most recent first
    """
    log_file = Path(log_file)
    if not log_file.exists():
        return []

    records = []
    with open(log_file, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                record = OperationRecord.from_json(line)
            except (json.JSONDecodeError, TypeError):
                continue  # Skip malformed lines

            if operation and record.operation != operation:
                continue
            records.append(record)

    return list(reversed(records[-limit:]))
