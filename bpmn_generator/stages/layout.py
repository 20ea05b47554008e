"""
Stage 3: Diagram Layout

Assigns deterministic coordinates to a ProcessModel. Elements are placed
left to right in model order at a fixed spacing, and every box is centred
on one shared horizontal line regardless of its size. Flows are straight
connectors between the horizontal centres of their endpoints.

Placement depends only on element order and kind, never on labels.
"""

import logging
from typing import Dict, List, Optional, Tuple

from bpmn_generator.core.config import LayoutConfig
from bpmn_generator.models.bpmn_elements import Element, ElementKind, ProcessModel
from bpmn_generator.models.diagram import Bounds, LayoutInfo, Waypoint

logger = logging.getLogger(__name__)


class LayoutEngine:
    """Computes LayoutInfo for a process model."""

    def __init__(self, config: Optional[LayoutConfig] = None):
        self.config = config or LayoutConfig()

    def layout(self, model: ProcessModel) -> LayoutInfo:
        """Lay out all elements and flows of a model.

        Args:
            model: Process model to place

        Returns:
            LayoutInfo keyed by element and flow IDs
        """
        shapes: Dict[str, Bounds] = {}
        for index, element in enumerate(model.elements):
            # Repeated IDs keep the first placement
            shapes.setdefault(element.id, self.element_bounds(element, index))

        edges: Dict[str, List[Waypoint]] = {}
        for flow in model.flows:
            source = shapes.get(flow.source_ref)
            target = shapes.get(flow.target_ref)
            if source is None or target is None:
                logger.debug(f"Skipping layout for dangling flow {flow.id}")
                continue
            edges[flow.id] = self.edge_waypoints(source, target)

        return LayoutInfo(shapes=shapes, edges=edges)

    def element_size(self, element: Element) -> Tuple[float, float]:
        """Get (width, height) for an element based on its kind."""
        if element.kind in (ElementKind.START_EVENT, ElementKind.END_EVENT):
            return self.config.event_size, self.config.event_size
        if element.kind == ElementKind.GATEWAY:
            return self.config.gateway_size, self.config.gateway_size
        return self.config.task_width, self.config.task_height

    def element_bounds(self, element: Element, index: int) -> Bounds:
        """Bounds for the element at ``index`` in model order."""
        width, height = self.element_size(element)
        return Bounds(
            x=self.config.base_x + index * self.config.spacing,
            y=self.config.center_y - height / 2,
            width=width,
            height=height,
        )

    def edge_waypoints(self, source: Bounds, target: Bounds) -> List[Waypoint]:
        """Waypoints from the source centre to the target centre on the shared line."""
        center_y = self.config.center_y
        return [
            Waypoint(x=source.center_x, y=center_y),
            Waypoint(x=target.center_x, y=center_y),
        ]


def compute_layout(model: ProcessModel, config: Optional[LayoutConfig] = None) -> LayoutInfo:
    """Lay out a model with the given (or default) geometry."""
    return LayoutEngine(config).layout(model)


__all__ = ["LayoutEngine", "compute_layout"]
