"""Registry access: the snapshotter interface and its reg.exe implementation."""
from .base import RegistrySnapshotter
from .reg_exe import RegExeSnapshotter, DEFAULT_TIMEOUT
from .reg_file import read_root_key

__all__ = [
    "RegistrySnapshotter",
    "RegExeSnapshotter",
    "DEFAULT_TIMEOUT",
    "read_root_key",
]
