"""Settings, config command, path and console helpers for a multi-repo manager."""

__version__ = "0.1.0"