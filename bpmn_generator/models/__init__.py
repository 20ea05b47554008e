"""
Domain models for the BPMN generator.
"""

from bpmn_generator.models.bpmn_elements import (
    DEFAULT_SUBTYPES,
    DEFINITIONS_ID,
    PROCESS_ID,
    TARGET_NAMESPACE,
    Element,
    ElementKind,
    ElementSet,
    ExtractionCategory,
    Flow,
    GatewayType,
    MatchProvenance,
    ProcessModel,
    TaskType,
)
from bpmn_generator.models.diagram import Bounds, LayoutInfo, Waypoint

__all__ = [
    "DEFAULT_SUBTYPES",
    "DEFINITIONS_ID",
    "PROCESS_ID",
    "TARGET_NAMESPACE",
    "Element",
    "ElementKind",
    "ElementSet",
    "ExtractionCategory",
    "Flow",
    "GatewayType",
    "MatchProvenance",
    "ProcessModel",
    "TaskType",
    "Bounds",
    "LayoutInfo",
    "Waypoint",
]
