"""Outcome reporting for multi-key operations."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..config_store import Profile
from ..errors import KeyOperationError


class OperationStatus(Enum):
    """Overall status of a profile operation."""
    FULL_SUCCESS = "full_success"
    PARTIAL_SUCCESS = "partial_success"
    CANCELLED = "cancelled"
    NOTHING_TO_DO = "nothing_to_do"


class KeyStatus(Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class KeyOutcome:
    """What happened to one key (or one snapshot file)."""
    file_name: str
    label: str
    status: KeyStatus
    message: str = ""
    error: Optional[KeyOperationError] = None
    # None when no backup was attempted
    backed_up: Optional[bool] = None

    def describe(self) -> str:
        text = f"{self.label}: {self.status.value.upper()}"
        if self.message:
            text += f" ({self.message})"
        return text


def overall_status(outcomes: list[KeyOutcome]) -> OperationStatus:
    if any(o.status is KeyStatus.FAILED for o in outcomes):
        return OperationStatus.PARTIAL_SUCCESS
    return OperationStatus.FULL_SUCCESS


@dataclass
class OperationResult:
    """Per-key outcomes plus an overall status."""
    status: OperationStatus
    outcomes: list[KeyOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[KeyOutcome]:
        return [o for o in self.outcomes if o.status is KeyStatus.OK]

    @property
    def skipped(self) -> list[KeyOutcome]:
        return [o for o in self.outcomes if o.status is KeyStatus.SKIPPED]

    @property
    def failed(self) -> list[KeyOutcome]:
        return [o for o in self.outcomes if o.status is KeyStatus.FAILED]

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.FULL_SUCCESS

    def _headline(self) -> str:
        return {
            OperationStatus.FULL_SUCCESS: "Completed successfully",
            OperationStatus.PARTIAL_SUCCESS: f"Completed with {len(self.failed)} failure(s)",
            OperationStatus.CANCELLED: "Cancelled",
            OperationStatus.NOTHING_TO_DO: "Nothing to do: no managed keys are included",
        }[self.status]

    def summary(self) -> str:
        """Human-readable multi-line report."""
        lines = [self._headline()]
        for outcome in self.outcomes:
            lines.append(f"  - {outcome.describe()}")
        return "\n".join(lines)


@dataclass
class SaveResult(OperationResult):
    name: str = ""
    # Set only when the profile was recorded in the catalog
    profile: Optional[Profile] = None
    replaced: Optional[Profile] = None

    def _headline(self) -> str:
        if self.status is OperationStatus.PARTIAL_SUCCESS:
            return f"Profile '{self.name}' was NOT saved: {len(self.failed)} key(s) failed to export"
        if self.status is OperationStatus.FULL_SUCCESS:
            verb = "Overwrote" if self.replaced else "Saved"
            return f"{verb} profile '{self.name}' ({len(self.succeeded)} key file(s))"
        return super()._headline()


@dataclass
class LoadResult(OperationResult):
    profile: Optional[Profile] = None
    orphans: list[str] = field(default_factory=list)
    orphans_imported: bool = False

    def _headline(self) -> str:
        name = self.profile.name if self.profile else "?"
        if self.status is OperationStatus.FULL_SUCCESS:
            return f"Loaded profile '{name}'"
        if self.status is OperationStatus.PARTIAL_SUCCESS:
            return f"Loaded profile '{name}' with {len(self.failed)} failure(s)"
        return super()._headline()

    def summary(self) -> str:
        text = super().summary()
        if self.orphans and not self.orphans_imported:
            text += "\n  Orphaned files not imported: " + ", ".join(self.orphans)
        return text


@dataclass
class DeleteResult(OperationResult):
    save_result: Optional[SaveResult] = None

    def _headline(self) -> str:
        if self.status is OperationStatus.FULL_SUCCESS:
            return f"Deleted {len(self.succeeded)} live key(s)"
        if self.status is OperationStatus.PARTIAL_SUCCESS:
            return f"Deleted {len(self.succeeded)} live key(s), {len(self.failed)} failed"
        return super()._headline()
