"""regswap: save and swap Windows registry key snapshots as named profiles."""

__version__ = "0.1.0"
