"""
Diagram Layout Models

Geometric placement derived from a ProcessModel: one bounding box per
element and a waypoint list per sequence flow, keyed by model ID.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


DIAGRAM_ID = "BPMNDiagram_1"
PLANE_ID = "BPMNPlane_1"


def shape_id(element_id: str) -> str:
    """Diagram shape ID for an element."""
    return f"BPMNShape_{element_id}"


def edge_id(flow_id: str) -> str:
    """Diagram edge ID for a flow."""
    return f"BPMNEdge_{flow_id}"


class Bounds(BaseModel):
    """Graphical bounds for diagram elements."""

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")
    width: float = Field(..., description="Width")
    height: float = Field(..., description="Height")

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


class Waypoint(BaseModel):
    """A point along a connection path."""

    x: float = Field(..., description="X coordinate")
    y: float = Field(..., description="Y coordinate")


class LayoutInfo(BaseModel):
    """Layout information for all diagram elements of one model."""

    shapes: Dict[str, Bounds] = Field(default_factory=dict, description="Element ID -> bounds")
    edges: Dict[str, List[Waypoint]] = Field(
        default_factory=dict, description="Flow ID -> waypoints"
    )

    def bounds_for(self, element_id: str) -> Optional[Bounds]:
        return self.shapes.get(element_id)

    def waypoints_for(self, flow_id: str) -> List[Waypoint]:
        return self.edges.get(flow_id, [])


__all__ = ["DIAGRAM_ID", "PLANE_ID", "Bounds", "Waypoint", "LayoutInfo", "edge_id", "shape_id"]
