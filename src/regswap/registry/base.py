"""Registry snapshotter abstraction."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class RegistrySnapshotter(ABC):
    """Exports, imports, probes and deletes registry subtrees.

    Methods return False for ordinary failures (absent key, tool exit code).
    Implementations may raise KeyOperationError subclasses such as
    ExternalToolTimeout; callers treat both as a per-key failure.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether the registry subtree exists."""
        pass

    @abstractmethod
    def export(self, path: str, dest: Path) -> bool:
        """Export the subtree at path to dest (overwriting it)."""
        pass

    @abstractmethod
    def import_file(self, src: Path) -> bool:
        """Import a .reg file into the registry."""
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Delete the subtree at path. Best-effort; failures are logged."""
        pass
