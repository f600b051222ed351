"""Registry snapshotter backed by the Windows reg.exe tool."""
import logging
import subprocess
from pathlib import Path

from ..errors import ExternalToolTimeout, KeyOperationError
from ..utils.logging_config import timed
from ..utils.retry import with_retry
from .base import RegistrySnapshotter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


class RegExeSnapshotter(RegistrySnapshotter):
    """
    Drives ``reg query/export/import/delete``.

    Every call is bounded by a timeout; a timeout raises ExternalToolTimeout
    instead of blocking the menu forever.
    """

    def __init__(self, reg_command: str = "reg", timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the snapshotter.

        Args:
            reg_command: reg.exe executable (name or full path)
            timeout: Seconds to wait for each reg.exe invocation
        """
        self.reg_command = reg_command
        self.timeout = timeout

    @with_retry()
    def _launch(self, cmd: list[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,  # We'll handle errors ourselves
            timeout=self.timeout,
            creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
        )

    def _run_reg(self, *args: str, target: str) -> subprocess.CompletedProcess:
        """Run a reg.exe command and return the completed process."""
        cmd = [self.reg_command] + list(args)
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = self._launch(cmd)
        except subprocess.TimeoutExpired as e:
            logger.error(f"reg {args[0]} timed out for {target}")
            raise ExternalToolTimeout(target, self.timeout) from e
        except OSError as e:
            logger.error(f"Cannot run {self.reg_command}: {e}")
            raise KeyOperationError(target, f"cannot run {self.reg_command}: {e}") from e

        if result.returncode != 0:
            logger.debug(f"reg {args[0]} exited {result.returncode}: {result.stderr.strip()}")
        return result

    @timed("reg_query")
    def exists(self, path: str) -> bool:
        result = self._run_reg("query", path, target=path)
        return result.returncode == 0

    @timed("reg_export")
    def export(self, path: str, dest: Path) -> bool:
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)

        result = self._run_reg("export", path, str(dest), "/y", target=path)
        if result.returncode != 0:
            logger.warning(f"Export of {path} failed: {result.stderr.strip()}")
            return False
        return dest.exists()

    @timed("reg_import")
    def import_file(self, src: Path) -> bool:
        src = Path(src)
        if not src.is_file():
            logger.warning(f"Cannot import missing file {src}")
            return False

        result = self._run_reg("import", str(src), target=src.name)
        if result.returncode != 0:
            logger.warning(f"Import of {src.name} failed: {result.stderr.strip()}")
            return False
        return True

    @timed("reg_delete")
    def delete(self, path: str) -> bool:
        result = self._run_reg("delete", path, "/f", target=path)
        if result.returncode != 0:
            logger.warning(f"Delete of {path} failed: {result.stderr.strip()}")
            return False
        return True
