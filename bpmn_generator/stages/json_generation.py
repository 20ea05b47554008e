"""
BPMN JSON Generation

Builds a bpmn-moddle style document from a ProcessModel: a definitions
root holding one process whose ``flowElements`` list every node followed
by every sequence flow. Records are tagged with a ``$type`` discriminator.
When a layout is supplied, a ``diagrams`` entry mirrors the XML diagram
section using the same IDs.
"""

import logging
from typing import Any, Dict, List, Optional

from bpmn_generator.models.bpmn_elements import (
    DEFINITIONS_ID,
    TARGET_NAMESPACE,
    Element,
    Flow,
    ProcessModel,
)
from bpmn_generator.models.diagram import (
    DIAGRAM_ID,
    PLANE_ID,
    Bounds,
    LayoutInfo,
    Waypoint,
    edge_id,
    shape_id,
)

logger = logging.getLogger(__name__)


def element_record(element: Element) -> Dict[str, Any]:
    return {"$type": element.bpmn_type, "id": element.id, "name": element.name}


def flow_record(flow: Flow) -> Dict[str, Any]:
    return {
        "$type": flow.bpmn_type,
        "id": flow.id,
        "sourceRef": flow.source_ref,
        "targetRef": flow.target_ref,
    }


def _bounds_record(bounds: Bounds) -> Dict[str, Any]:
    return {
        "$type": "dc:Bounds",
        "x": bounds.x,
        "y": bounds.y,
        "width": bounds.width,
        "height": bounds.height,
    }


def _waypoint_record(waypoint: Waypoint) -> Dict[str, Any]:
    return {"$type": "dc:Point", "x": waypoint.x, "y": waypoint.y}


def diagram_record(model: ProcessModel, layout: LayoutInfo) -> Dict[str, Any]:
    """Diagram section: one shape per laid-out element, one edge per routed flow."""
    plane_elements: List[Dict[str, Any]] = [
        {
            "$type": "bpmndi:BPMNShape",
            "id": shape_id(element_id),
            "bpmnElement": element_id,
            "bounds": _bounds_record(bounds),
        }
        for element_id, bounds in layout.shapes.items()
    ]
    for flow in model.flows:
        waypoints = layout.waypoints_for(flow.id)
        if waypoints:
            plane_elements.append(
                {
                    "$type": "bpmndi:BPMNEdge",
                    "id": edge_id(flow.id),
                    "bpmnElement": flow.id,
                    "waypoint": [_waypoint_record(w) for w in waypoints],
                }
            )

    return {
        "$type": "bpmndi:BPMNDiagram",
        "id": DIAGRAM_ID,
        "plane": {
            "$type": "bpmndi:BPMNPlane",
            "id": PLANE_ID,
            "bpmnElement": model.process_id,
            "planeElement": plane_elements,
        },
    }


def to_json(model: ProcessModel, layout: Optional[LayoutInfo] = None) -> Dict[str, Any]:
    """Serialize a model to a bpmn-moddle style document.

    Args:
        model: Process model to serialize
        layout: Optional layout; adds a ``diagrams`` entry when given

    Returns:
        ``{"definitions": {...}}`` with JSON-compatible values only
    """
    flow_elements = [element_record(e) for e in model.elements]
    flow_elements.extend(flow_record(f) for f in model.flows)

    definitions: Dict[str, Any] = {
        "$type": "bpmn:Definitions",
        "id": DEFINITIONS_ID,
        "targetNamespace": TARGET_NAMESPACE,
        "rootElements": [
            {
                "$type": "bpmn:Process",
                "id": model.process_id,
                "name": model.process_name,
                "isExecutable": False,
                "flowElements": flow_elements,
            }
        ],
    }
    if layout is not None:
        definitions["diagrams"] = [diagram_record(model, layout)]

    logger.debug(f"Generated JSON for {model.process_id}: {len(flow_elements)} flow elements")
    return {"definitions": definitions}


def referenced_ids(document: Dict[str, Any]) -> List[str]:
    """IDs of every flow element in a document, in document order."""
    ids = []
    for root in document.get("definitions", {}).get("rootElements", []):
        ids.extend(item.get("id") for item in root.get("flowElements", []))
    return ids


__all__ = ["diagram_record", "element_record", "flow_record", "referenced_ids", "to_json"]
