from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when configuration is missing or invalid."""


class InputError(RuntimeError):
    """Raised when an input records file cannot be read or has the wrong shape."""


class ReportError(RuntimeError):
    """Raised when a rendered report cannot be written."""
