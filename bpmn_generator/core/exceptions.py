"""
Exception hierarchy for the BPMN generator.

Structural defects in a process model are never raised; they are reported
through ValidationReport. These exceptions cover contract violations by the
caller, such as requesting an output format that does not exist.
"""

from typing import Iterable, Optional


class BPMNGeneratorError(Exception):
    """Base exception for the BPMN generator."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnsupportedFormatError(BPMNGeneratorError, ValueError):
    """Raised when an unknown output format is requested."""

    def __init__(self, requested: object, supported: Iterable[str]):
        supported = list(supported)
        super().__init__(
            f"Unsupported output format: {requested!r}. Supported formats: {', '.join(supported)}",
            details={"requested": str(requested), "supported": supported},
        )
        self.requested = requested
        self.supported = supported


class ConfigurationError(BPMNGeneratorError, ValueError):
    """Raised when configuration values are invalid."""


__all__ = ["BPMNGeneratorError", "UnsupportedFormatError", "ConfigurationError"]
