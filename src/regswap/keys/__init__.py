"""Managed registry key definitions."""
from .definitions import (
    ManagedKeyDefinition,
    DEFAULT_KEYS,
    KEYS_FILE_NAME,
    KeyDefinitionError,
    key_identifier,
    load_key_definitions,
)

__all__ = [
    "ManagedKeyDefinition",
    "DEFAULT_KEYS",
    "KEYS_FILE_NAME",
    "KeyDefinitionError",
    "key_identifier",
    "load_key_definitions",
]
