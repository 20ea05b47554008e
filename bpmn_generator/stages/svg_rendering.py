"""
SVG Preview Rendering

Lightweight, fixed-size SVG previews of a process model. These are
illustrative thumbnails, not faithful diagrams: one slot each for the first
start event, first task, first gateway and first end event, drawn at fixed
positions and labelled with the element names.
"""

import base64
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from lxml import etree

from bpmn_generator.core.exceptions import UnsupportedFormatError
from bpmn_generator.models.bpmn_elements import Element, ElementKind, ProcessModel
from bpmn_generator.stages.pattern_extraction import clean_label, truncate_label

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
FONT_FAMILY = "Arial"
LABEL_MAX_LENGTH = 8

DATA_URI_ENCODINGS = ("utf8", "base64")


@dataclass(frozen=True)
class SlotStyle:
    """Fill and stroke for one kind of slot."""

    fill: str
    stroke: str
    stroke_width: str = "2"


@dataclass(frozen=True)
class Slot:
    """A fixed preview position for one element kind."""

    kind: ElementKind
    center_x: float
    left: float
    right: float
    style: SlotStyle
    label_y: float


PREVIEW_STYLES = {
    ElementKind.START_EVENT: SlotStyle(fill="#e8f5e8", stroke="#4CAF50"),
    ElementKind.TASK: SlotStyle(fill="#f0f8ff", stroke="#2196F3"),
    ElementKind.GATEWAY: SlotStyle(fill="#fff3e0", stroke="#FF9800"),
    ElementKind.END_EVENT: SlotStyle(fill="#ffebee", stroke="#f44336", stroke_width="3"),
}

SIMPLE_STYLES = {
    ElementKind.START_EVENT: SlotStyle(fill="#4CAF50", stroke="#333"),
    ElementKind.TASK: SlotStyle(fill="#2196F3", stroke="#333"),
    ElementKind.END_EVENT: SlotStyle(fill="#f44336", stroke="#333", stroke_width="3"),
}


def _svg(tag: str) -> str:
    return "{%s}%s" % (SVG_NAMESPACE, tag)


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class SVGCanvas:
    """Small builder over an lxml ``<svg>`` root."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.root = etree.Element(_svg("svg"), nsmap={None: SVG_NAMESPACE})
        self.root.set("width", str(width))
        self.root.set("height", str(height))
        self.root.set("style", "background: white; border: 1px solid #ddd;")

    def add(self, tag: str, **attributes: object) -> etree._Element:
        elem = etree.SubElement(self.root, _svg(tag))
        for key, value in attributes.items():
            if isinstance(value, (int, float)):
                value = _num(value)
            elem.set(key.replace("_", "-"), str(value))
        return elem

    def text(
        self, x: float, y: float, content: str, size: int = 12, **attributes: object
    ) -> etree._Element:
        elem = self.add(
            "text",
            x=x,
            y=y,
            text_anchor="middle",
            font_family=FONT_FAMILY,
            font_size=size,
            **attributes,
        )
        elem.text = clean_label(content)
        return elem

    def circle(self, cx: float, cy: float, r: float, style: SlotStyle) -> etree._Element:
        return self.add(
            "circle",
            cx=cx,
            cy=cy,
            r=r,
            fill=style.fill,
            stroke=style.stroke,
            stroke_width=style.stroke_width,
        )

    def arrow(self, x1: float, x2: float, y: float, color: str) -> None:
        """Horizontal connector ending in a small arrowhead at ``x2``."""
        self.add("line", x1=x1, y1=y, x2=x2, y2=y, stroke=color, stroke_width=2)
        head = [(x2 - 5, y - 5), (x2 + 5, y), (x2 - 5, y + 5)]
        self.add("polygon", points=" ".join(f"{_num(px)},{_num(py)}" for px, py in head), fill=color)

    def tostring(self) -> str:
        return etree.tostring(self.root, pretty_print=True, encoding="unicode")


def first_of_kinds(
    model: ProcessModel, kinds: List[ElementKind]
) -> List[Tuple[ElementKind, Element]]:
    """First element of each kind present in the model, in ``kinds`` order."""
    picked = []
    for kind in kinds:
        elements = model.elements_of_kind(kind)
        if elements:
            picked.append((kind, elements[0]))
    return picked


def _label(element: Element) -> str:
    return truncate_label(element.name, LABEL_MAX_LENGTH)


class PreviewRenderer:
    """Renders the 600x140 preview with start, task, gateway and end slots."""

    WIDTH = 600
    HEIGHT = 140
    CENTER_Y = 80
    CONNECTOR_COLOR = "#666"

    SLOTS = {
        ElementKind.START_EVENT: Slot(
            kind=ElementKind.START_EVENT,
            center_x=80,
            left=60,
            right=100,
            style=PREVIEW_STYLES[ElementKind.START_EVENT],
            label_y=105,
        ),
        ElementKind.TASK: Slot(
            kind=ElementKind.TASK,
            center_x=240,
            left=190,
            right=290,
            style=PREVIEW_STYLES[ElementKind.TASK],
            label_y=85,
        ),
        ElementKind.GATEWAY: Slot(
            kind=ElementKind.GATEWAY,
            center_x=400,
            left=380,
            right=420,
            style=PREVIEW_STYLES[ElementKind.GATEWAY],
            label_y=115,
        ),
        ElementKind.END_EVENT: Slot(
            kind=ElementKind.END_EVENT,
            center_x=520,
            left=500,
            right=540,
            style=PREVIEW_STYLES[ElementKind.END_EVENT],
            label_y=105,
        ),
    }

    def render(self, model: ProcessModel) -> str:
        canvas = SVGCanvas(self.WIDTH, self.HEIGHT)
        canvas.text(self.WIDTH / 2, 25, model.process_name, size=14, font_weight="bold")

        picked = first_of_kinds(model, list(self.SLOTS))
        previous: Optional[Slot] = None
        for kind, element in picked:
            slot = self.SLOTS[kind]
            if previous is not None:
                canvas.arrow(previous.right, slot.left - 10, self.CENTER_Y, self.CONNECTOR_COLOR)
            self._draw(canvas, slot, element)
            previous = slot

        logger.debug(f"Rendered SVG preview with {len(picked)} slots")
        return canvas.tostring()

    def _draw(self, canvas: SVGCanvas, slot: Slot, element: Element) -> None:
        cy = self.CENTER_Y
        style = slot.style
        if slot.kind == ElementKind.TASK:
            canvas.add(
                "rect",
                x=slot.left,
                y=cy - 20,
                width=slot.right - slot.left,
                height=40,
                rx=5,
                fill=style.fill,
                stroke=style.stroke,
                stroke_width=style.stroke_width,
            )
        elif slot.kind == ElementKind.GATEWAY:
            cx = slot.center_x
            canvas.add(
                "path",
                d=(
                    f"M {_num(cx)} {cy - 20} L {_num(slot.right)} {cy} "
                    f"L {_num(cx)} {cy + 20} L {_num(slot.left)} {cy} Z"
                ),
                fill=style.fill,
                stroke=style.stroke,
                stroke_width=style.stroke_width,
            )
        else:
            canvas.circle(slot.center_x, cy, 20, style)

        canvas.text(slot.center_x, slot.label_y, _label(element), size=10)


class SimplePreviewRenderer:
    """Renders the minimal 400x120 start, task and end preview."""

    WIDTH = 400
    HEIGHT = 120
    CENTER_Y = 60
    CONNECTOR_COLOR = "#333"

    SLOTS = {
        ElementKind.START_EVENT: Slot(
            kind=ElementKind.START_EVENT,
            center_x=50,
            left=30,
            right=70,
            style=SIMPLE_STYLES[ElementKind.START_EVENT],
            label_y=65,
        ),
        ElementKind.TASK: Slot(
            kind=ElementKind.TASK,
            center_x=170,
            left=130,
            right=210,
            style=SIMPLE_STYLES[ElementKind.TASK],
            label_y=65,
        ),
        ElementKind.END_EVENT: Slot(
            kind=ElementKind.END_EVENT,
            center_x=280,
            left=260,
            right=300,
            style=SIMPLE_STYLES[ElementKind.END_EVENT],
            label_y=65,
        ),
    }

    def render(self, model: ProcessModel) -> str:
        canvas = SVGCanvas(self.WIDTH, self.HEIGHT)
        canvas.text(self.WIDTH / 2, 20, model.process_name, size=14, font_weight="bold")

        previous: Optional[Slot] = None
        for kind, element in first_of_kinds(model, list(self.SLOTS)):
            slot = self.SLOTS[kind]
            if previous is not None:
                canvas.arrow(previous.right, slot.left - 10, self.CENTER_Y, self.CONNECTOR_COLOR)
            if kind == ElementKind.TASK:
                canvas.add(
                    "rect",
                    x=slot.left,
                    y=self.CENTER_Y - 20,
                    width=slot.right - slot.left,
                    height=40,
                    rx=5,
                    fill=slot.style.fill,
                    stroke=slot.style.stroke,
                    stroke_width=slot.style.stroke_width,
                )
            else:
                canvas.circle(slot.center_x, self.CENTER_Y, 20, slot.style)
            canvas.text(slot.center_x, slot.label_y, _label(element), fill="white")
            previous = slot

        return canvas.tostring()


def to_svg(model: ProcessModel) -> str:
    """Render the fixed-size 600x140 preview."""
    return PreviewRenderer().render(model)


def to_simple_svg(model: ProcessModel) -> str:
    """Render the minimal 400x120 preview."""
    return SimplePreviewRenderer().render(model)


def _utf8_uri(svg: str) -> str:
    return "data:image/svg+xml;charset=utf-8," + quote(svg, safe="-_.!~*'()")


def _base64_uri(svg: str) -> str:
    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode("utf-8")).decode("ascii")


_DATA_URI_BUILDERS: Dict[str, Callable[[str], str]] = {"utf8": _utf8_uri, "base64": _base64_uri}


def svg_data_uri(svg: str, encoding: str = "utf8") -> str:
    """Wrap an SVG document in a ``data:`` URI.

    Args:
        svg: SVG markup
        encoding: ``utf8`` (percent-encoded) or ``base64``

    Raises:
        UnsupportedFormatError: If the encoding is unknown
    """
    builder = _DATA_URI_BUILDERS.get(encoding)
    if builder is None:
        raise UnsupportedFormatError(encoding, DATA_URI_ENCODINGS)
    return builder(svg)


__all__ = [
    "SVG_NAMESPACE",
    "DATA_URI_ENCODINGS",
    "PreviewRenderer",
    "SimplePreviewRenderer",
    "SVGCanvas",
    "svg_data_uri",
    "to_simple_svg",
    "to_svg",
]
