"""Error taxonomy for regswap.

Recoverable errors (parse failures, per-key tool failures) are logged and
folded into operation results. User-facing errors (duplicate names, missing
profiles) abort the operation before any state changes.
"""


class RegswapError(Exception):
    """Base class for all regswap errors."""
    pass


class StorageInitError(RegswapError):
    """The base storage directories could not be created."""
    pass


class ConfigParseError(RegswapError):
    """config.json could not be parsed; defaults are used instead."""
    pass


class ProfileCatalogParseError(RegswapError):
    """profiles.json could not be parsed; the catalog loads empty."""
    pass


class DuplicateNameError(RegswapError):
    """A profile with the requested name already exists."""

    def __init__(self, name: str):
        super().__init__(f"A profile named '{name}' already exists")
        self.name = name


class NotFoundError(RegswapError):
    """A profile, its data directory or a managed key is missing."""
    pass


class KeyOperationError(RegswapError):
    """A registry tool operation failed for a single key."""

    def __init__(self, target: str, message: str):
        super().__init__(f"{target}: {message}")
        self.target = target


class ExportFailure(KeyOperationError):
    pass


class ImportFailure(KeyOperationError):
    pass


class DeleteFailure(KeyOperationError):
    pass


class ExternalToolTimeout(KeyOperationError):
    """The registry tool did not finish within the configured timeout."""

    def __init__(self, target: str, timeout: float):
        super().__init__(target, f"registry tool timed out after {timeout:g}s")
        self.timeout = timeout
