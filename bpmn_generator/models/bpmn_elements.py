"""
BPMN Process Model

Pydantic-based models for the process graph produced from Japanese
business-process text. Element and flow identifiers follow the
``{category}_{n}`` convention (``start_1``, ``task_2``, ``flow_3``) and are
referenced verbatim by every serializer.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

PROCESS_ID = "process_1"
DEFINITIONS_ID = "Definitions_1"
TARGET_NAMESPACE = "http://bpmn.io/schema/bpmn"


class ElementKind(str, Enum):
    """Kinds of flow nodes in a process model."""

    START_EVENT = "startEvent"
    END_EVENT = "endEvent"
    TASK = "task"
    GATEWAY = "gateway"


class TaskType(str, Enum):
    """BPMN task subtypes."""

    TASK = "task"
    USER_TASK = "userTask"
    SERVICE_TASK = "serviceTask"
    MANUAL_TASK = "manualTask"
    SCRIPT_TASK = "scriptTask"
    SEND_TASK = "sendTask"
    RECEIVE_TASK = "receiveTask"


class GatewayType(str, Enum):
    """BPMN gateway subtypes."""

    EXCLUSIVE = "exclusiveGateway"
    INCLUSIVE = "inclusiveGateway"
    PARALLEL = "parallelGateway"
    EVENT_BASED = "eventBasedGateway"


class ExtractionCategory(str, Enum):
    """Pattern rule categories, in assembly order."""

    START = "start"
    TASK = "task"
    GATEWAY = "gateway"
    END = "end"


# Default subtype per kind when none is given
DEFAULT_SUBTYPES: Dict[ElementKind, str] = {
    ElementKind.TASK: TaskType.USER_TASK.value,
    ElementKind.GATEWAY: GatewayType.EXCLUSIVE.value,
}


class MatchProvenance(BaseModel):
    """Which pattern rule produced an element, and where it matched."""

    category: ExtractionCategory = Field(..., description="Rule category")
    rule_id: str = Field(..., description="Identifier of the matching rule")
    start: int = Field(..., ge=0, description="Match start offset in the input text")
    end: int = Field(..., ge=0, description="Match end offset in the input text")
    matched_text: str = Field("", description="Raw captured text before trimming")

    model_config = ConfigDict(frozen=True)


class Element(BaseModel):
    """A flow node (event, task or gateway)."""

    id: str = Field(..., description="Unique element ID")
    name: str = Field(..., description="Element label")
    kind: Optional[ElementKind] = Field(None, description="Element kind")
    subtype: Optional[str] = Field(None, description="Task or gateway subtype")
    provenance: Optional[MatchProvenance] = Field(
        None, description="Pattern match that produced the element (None for fallbacks)"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def xml_tag(self) -> str:
        """Local XML tag name for this element (without namespace prefix)."""
        if self.kind in (ElementKind.TASK, ElementKind.GATEWAY):
            return self.subtype or DEFAULT_SUBTYPES[self.kind]
        if self.kind is None:
            return TaskType.TASK.value
        return self.kind.value

    @property
    def bpmn_type(self) -> str:
        """bpmn-moddle style type discriminator, e.g. ``bpmn:UserTask``."""
        if self.kind is None:
            return ""
        tag = self.xml_tag
        return f"bpmn:{tag[0].upper()}{tag[1:]}"

    @property
    def is_fallback(self) -> bool:
        """Whether this element was synthesized rather than matched."""
        return self.provenance is None


class Flow(BaseModel):
    """Sequence flow between two elements."""

    id: str = Field(..., description="Unique flow ID")
    source_ref: str = Field(..., description="Source element ID")
    target_ref: str = Field(..., description="Target element ID")

    model_config = ConfigDict(frozen=True)

    @property
    def bpmn_type(self) -> str:
        return "bpmn:SequenceFlow"


class ElementSet(BaseModel):
    """Extraction result grouped by category, each list in match order."""

    start_events: List[Element] = Field(default_factory=list)
    tasks: List[Element] = Field(default_factory=list)
    gateways: List[Element] = Field(default_factory=list)
    end_events: List[Element] = Field(default_factory=list)

    def by_category(self, category: ExtractionCategory) -> List[Element]:
        """Get the element list for a category."""
        return {
            ExtractionCategory.START: self.start_events,
            ExtractionCategory.TASK: self.tasks,
            ExtractionCategory.GATEWAY: self.gateways,
            ExtractionCategory.END: self.end_events,
        }[category]

    def ordered(self) -> List[Element]:
        """All elements in assembly order: starts, tasks, gateways, ends."""
        return [*self.start_events, *self.tasks, *self.gateways, *self.end_events]

    def counts(self) -> Dict[str, int]:
        """Element counts per category."""
        return {
            "start_events": len(self.start_events),
            "tasks": len(self.tasks),
            "gateways": len(self.gateways),
            "end_events": len(self.end_events),
        }

    def __len__(self) -> int:
        return len(self.ordered())


class ProcessModel(BaseModel):
    """Aggregate root: process identity, ordered elements and flows."""

    process_id: str = Field(default=PROCESS_ID, description="Process ID")
    process_name: str = Field(..., description="Derived process name")
    elements: List[Element] = Field(default_factory=list, description="Flow nodes in order")
    flows: List[Flow] = Field(default_factory=list, description="Sequence flows")

    model_config = ConfigDict(frozen=True)

    def get_element(self, element_id: str) -> Optional[Element]:
        """Get the first element with the given ID."""
        return next((e for e in self.elements if e.id == element_id), None)

    def element_ids(self) -> List[str]:
        return [e.id for e in self.elements]

    def flow_ids(self) -> List[str]:
        return [f.id for f in self.flows]

    def elements_of_kind(self, kind: ElementKind) -> List[Element]:
        """Get all elements of a kind, in model order."""
        return [e for e in self.elements if e.kind == kind]


__all__ = [
    "PROCESS_ID",
    "DEFINITIONS_ID",
    "TARGET_NAMESPACE",
    "ElementKind",
    "TaskType",
    "GatewayType",
    "ExtractionCategory",
    "DEFAULT_SUBTYPES",
    "MatchProvenance",
    "Element",
    "Flow",
    "ElementSet",
    "ProcessModel",
]
