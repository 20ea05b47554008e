"""
BPMN 2.0 XML Generation

Converts a ProcessModel and its LayoutInfo into BPMN 2.0 XML, including
the BPMN Diagram Interchange (DI) section that bpmn-js style viewers use
for placement.

Supports:
- One flow-node tag per element, chosen by kind and subtype
- One sequenceFlow per flow, references emitted verbatim
- BPMNShape/BPMNEdge records referencing model IDs via bpmnElement
"""

import logging
from typing import List, Optional, Union

from lxml import etree

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
from bpmn_generator.stages.pattern_extraction import clean_label

logger = logging.getLogger(__name__)

# BPMN 2.0 Namespaces
BPMN_NAMESPACE = "http://www.omg.org/spec/BPMN/20100524/MODEL"
BPMNDI_NAMESPACE = "http://www.omg.org/spec/BPMN/20100524/DI"
DC_NAMESPACE = "http://www.omg.org/spec/DD/20100524/DC"
DI_NAMESPACE = "http://www.omg.org/spec/DD/20100524/DI"

NSMAP = {
    "bpmn": BPMN_NAMESPACE,
    "bpmndi": BPMNDI_NAMESPACE,
    "dc": DC_NAMESPACE,
    "di": DI_NAMESPACE,
}


def format_number(value: Union[int, float]) -> str:
    """Render a coordinate without a trailing ``.0`` for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _bpmn(tag: str) -> str:
    return "{%s}%s" % (BPMN_NAMESPACE, tag)


class BPMNXMLGenerator:
    """Generates BPMN 2.0 XML from a ProcessModel.

    The generator holds no per-call state; one instance can serve any
    number of models.
    """

    def __init__(self, pretty_print: bool = True):
        """Initialize XML generator.

        Args:
            pretty_print: Whether to indent the output
        """
        self.pretty_print = pretty_print

    def generate_xml(self, model: ProcessModel, layout: Optional[LayoutInfo] = None) -> str:
        """Generate BPMN 2.0 XML.

        Args:
            model: Process model to serialize
            layout: Diagram layout; the diagram plane is empty when omitted

        Returns:
            XML document string (UTF-8 declaration included)
        """
        root = self.build_tree(model, layout)
        xml = etree.tostring(
            root, pretty_print=self.pretty_print, xml_declaration=True, encoding="UTF-8"
        ).decode("utf-8")
        logger.debug(
            f"Generated XML for {model.process_id}: "
            f"{len(model.elements)} elements, {len(model.flows)} flows"
        )
        return xml

    def build_tree(self, model: ProcessModel, layout: Optional[LayoutInfo] = None) -> etree._Element:
        """Build the definitions element tree."""
        root = etree.Element(_bpmn("definitions"), nsmap=NSMAP)
        root.set("id", DEFINITIONS_ID)
        root.set("targetNamespace", TARGET_NAMESPACE)

        root.append(self._build_process_element(model))
        root.append(self._build_diagram_element(model, layout or LayoutInfo()))
        return root

    def _build_process_element(self, model: ProcessModel) -> etree._Element:
        """Build process XML element."""
        process_elem = etree.Element(_bpmn("process"))
        process_elem.set("id", model.process_id)
        process_elem.set("name", clean_label(model.process_name))
        process_elem.set("isExecutable", "false")

        for element in model.elements:
            process_elem.append(self._build_flow_node_element(element))

        for flow in model.flows:
            process_elem.append(self._build_sequence_flow_element(flow))

        return process_elem

    def _build_flow_node_element(self, element: Element) -> etree._Element:
        """Build XML element for a flow node."""
        elem = etree.Element(_bpmn(element.xml_tag))
        elem.set("id", element.id)
        elem.set("name", clean_label(element.name))
        return elem

    def _build_sequence_flow_element(self, flow: Flow) -> etree._Element:
        """Build XML element for a sequence flow."""
        elem = etree.Element(_bpmn("sequenceFlow"))
        elem.set("id", flow.id)
        elem.set("sourceRef", flow.source_ref)
        elem.set("targetRef", flow.target_ref)
        return elem

    def _build_diagram_element(self, model: ProcessModel, layout: LayoutInfo) -> etree._Element:
        """Build BPMN Diagram Interchange element."""
        diagram = etree.Element("{%s}BPMNDiagram" % BPMNDI_NAMESPACE)
        diagram.set("id", DIAGRAM_ID)

        plane = etree.SubElement(diagram, "{%s}BPMNPlane" % BPMNDI_NAMESPACE)
        plane.set("id", PLANE_ID)
        plane.set("bpmnElement", model.process_id)

        for element_id, bounds in layout.shapes.items():
            plane.append(self._build_shape_diagram(element_id, bounds))

        for flow in model.flows:
            waypoints = layout.waypoints_for(flow.id)
            if waypoints:
                plane.append(self._build_edge_diagram(flow.id, waypoints))

        return diagram

    def _build_shape_diagram(self, element_id: str, bounds: Bounds) -> etree._Element:
        """Build BPMN shape diagram element."""
        shape = etree.Element("{%s}BPMNShape" % BPMNDI_NAMESPACE)
        shape.set("id", shape_id(element_id))
        shape.set("bpmnElement", element_id)

        bounds_elem = etree.SubElement(shape, "{%s}Bounds" % DC_NAMESPACE)
        bounds_elem.set("x", format_number(bounds.x))
        bounds_elem.set("y", format_number(bounds.y))
        bounds_elem.set("width", format_number(bounds.width))
        bounds_elem.set("height", format_number(bounds.height))

        return shape

    def _build_edge_diagram(self, flow_id: str, waypoints: List[Waypoint]) -> etree._Element:
        """Build BPMN edge diagram element."""
        edge = etree.Element("{%s}BPMNEdge" % BPMNDI_NAMESPACE)
        edge.set("id", edge_id(flow_id))
        edge.set("bpmnElement", flow_id)

        for waypoint in waypoints:
            wp = etree.SubElement(edge, "{%s}waypoint" % DI_NAMESPACE)
            wp.set("x", format_number(waypoint.x))
            wp.set("y", format_number(waypoint.y))

        return edge


def to_xml(model: ProcessModel, layout: Optional[LayoutInfo] = None) -> str:
    """Serialize a model (and its layout) to BPMN 2.0 XML."""
    return BPMNXMLGenerator().generate_xml(model, layout)


__all__ = [
    "BPMN_NAMESPACE",
    "BPMNDI_NAMESPACE",
    "DC_NAMESPACE",
    "DI_NAMESPACE",
    "NSMAP",
    "BPMNXMLGenerator",
    "format_number",
    "to_xml",
]
