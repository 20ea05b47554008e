"""
Core infrastructure module for the BPMN generator.

Provides configuration, the exception hierarchy, logging and observability.
"""

from .config import GeneratorConfig, LayoutConfig, NamingConfig, OutputFormat
from .exceptions import BPMNGeneratorError, ConfigurationError, UnsupportedFormatError
from .observability import (
    ObservabilityConfig,
    ObservabilityManager,
    Timer,
    log_execution,
    record_metric,
    span,
)

__all__ = [
    # Config
    "GeneratorConfig",
    "LayoutConfig",
    "NamingConfig",
    "OutputFormat",
    # Errors
    "BPMNGeneratorError",
    "ConfigurationError",
    "UnsupportedFormatError",
    # Observability
    "ObservabilityConfig",
    "ObservabilityManager",
    "Timer",
    "log_execution",
    "record_metric",
    "span",
]
