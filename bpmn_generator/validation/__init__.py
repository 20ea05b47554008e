"""Structural validation of process models and definitions documents."""

from .graph_validator import (
    FlowElementRecord,
    GraphValidator,
    Severity,
    ValidationIssue,
    ValidationIssueCode,
    ValidationReport,
    ValidationRule,
    detect_cycles,
    validate_definitions,
    validate_model,
    validate_unique_ids,
    validate_with_rules,
)

__all__ = [
    "FlowElementRecord",
    "GraphValidator",
    "Severity",
    "ValidationIssue",
    "ValidationIssueCode",
    "ValidationReport",
    "ValidationRule",
    "detect_cycles",
    "validate_definitions",
    "validate_model",
    "validate_unique_ids",
    "validate_with_rules",
]
