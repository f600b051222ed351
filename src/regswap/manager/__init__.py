"""Profile lifecycle orchestration."""
from .profile_manager import ProfileManager
from .results import (
    OperationStatus,
    KeyStatus,
    KeyOutcome,
    OperationResult,
    SaveResult,
    LoadResult,
    DeleteResult,
)

__all__ = [
    "ProfileManager",
    "OperationStatus",
    "KeyStatus",
    "KeyOutcome",
    "OperationResult",
    "SaveResult",
    "LoadResult",
    "DeleteResult",
]
