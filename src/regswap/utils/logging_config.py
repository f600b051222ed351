"""Logging configuration for regswap.

Provides:
- Console output (WARNING+ by default so the menu stays readable)
- File-based logging with rotation (DEBUG, captures everything)
- Performance timing of registry tool calls on a separate logger

Environment Variables:
    REGSWAP_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: WARNING)
    REGSWAP_LOG_FILE: Path to log file (default: <base_dir>/regswap.log)
    REGSWAP_LOG_MAX_SIZE: Max log file size in MB (default: 5)
    REGSWAP_LOG_BACKUPS: Number of rotated log files to keep (default: 3)

Usage:
    from regswap.utils.logging_config import setup_logging, timed

    setup_logging(base_dir)  # Call once at startup

    @timed("reg_export")
    def export(self, path, dest):
        ...
"""
import functools
import logging
import os
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("regswap.perf")
main_logger = logging.getLogger("regswap")

MAIN_FORMAT = "%(asctime)s.%(msecs)03d | %(name)-28s | %(levelname)-7s | %(message)s"


def get_log_level(default: str = "WARNING") -> int:
    """Get console log level from environment."""
    level_str = os.environ.get("REGSWAP_LOG_LEVEL", default).upper()
    return getattr(logging, level_str, logging.WARNING)


def get_log_file(log_dir: Path) -> Path:
    """Get log file path from environment."""
    default_path = Path(log_dir) / "regswap.log"
    return Path(os.environ.get("REGSWAP_LOG_FILE", str(default_path)))


def setup_logging(log_dir: Path, verbose: bool = False) -> Path:
    """Configure logging for the application.

    Args:
        log_dir: Directory for regswap.log and regswap-perf.log
        verbose: Force DEBUG on the console

    Returns:
        Path of the main log file
    """
    log_level = logging.DEBUG if verbose else get_log_level()
    log_file = get_log_file(log_dir)
    max_size_mb = int(os.environ.get("REGSWAP_LOG_MAX_SIZE", "5"))
    backup_count = int(os.environ.get("REGSWAP_LOG_BACKUPS", "3"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(MAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    perf_log_file = log_file.parent / "regswap-perf.log"
    perf_handler = RotatingFileHandler(
        perf_log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    perf_handler.setLevel(logging.DEBUG)
    perf_handler.setFormatter(perf_format)

    # Replace handlers so repeated calls don't duplicate output
    main_logger.handlers.clear()
    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.addHandler(console_handler)
    main_logger.addHandler(file_handler)

    perf_logger.handlers.clear()
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.addHandler(perf_handler)
    perf_logger.propagate = False

    main_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    return log_file


def _perf_line(operation: str, target: Optional[str], elapsed: float, outcome: str) -> str:
    return f"{operation:16s} | {target or 'N/A':40.40s} | {elapsed:8.2f}ms | {outcome}"


def timed(operation: str):
    """Decorator to log execution time of a registry operation.

    The first positional argument after self is logged as the target.

    Usage:
        @timed("reg_import")
        def import_file(self, src):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            target = str(args[1]) if len(args) > 1 else None

            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.info(_perf_line(operation, target, elapsed, "OK"))
                return result
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(_perf_line(operation, target, elapsed, f"FAIL: {e}"))
                raise

        return wrapper

    return decorator


@contextmanager
def timed_section(operation: str, target: Optional[str] = None, **extra):
    """Context manager for timing a whole workflow.

    Usage:
        with timed_section("save_profile", target="Main account"):
            ...
    """
    start = time.perf_counter()
    extra_str = " | ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""

    try:
        yield
        elapsed = (time.perf_counter() - start) * 1000
        msg = _perf_line(operation, target, elapsed, "OK")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.info(msg)
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        msg = _perf_line(operation, target, elapsed, f"FAIL: {e}")
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.warning(msg)
        raise
