"""
ASCII Preview

Condensed one-line text rendering of a process for terminals and chat
surfaces. Names are pulled from the generated XML with regular expressions
rather than from the model, so the preview shows exactly what the XML says:
the first start event, every user task, then the first end event.
"""

import logging
import re
from typing import List, Union
from xml.sax.saxutils import unescape

from bpmn_generator.models.bpmn_elements import ProcessModel
from bpmn_generator.stages.xml_generation import to_xml

logger = logging.getLogger(__name__)

ARROW = " ─► "
EVENT_NAME_MAX = 8
TASK_NAME_MAX = 10

BANNER = (
    "╔══════════════════════════════════════════╗\n"
    "║           📊 BPMN プロセスフロー           ║\n"
    "╚══════════════════════════════════════════╝"
)

START_GLYPH = "🟢"
TASK_GLYPH = "📋"
END_GLYPH = "🔴"

_XML_ENTITIES = {"&quot;": '"', "&apos;": "'", "&#10;": "\n", "&#13;": "\r", "&#9;": "\t"}


def _name_pattern(tag: str) -> "re.Pattern[str]":
    return re.compile(rf'<bpmn:{tag}\b[^>]*?\bname="([^"]*)"')


START_EVENT_PATTERN = _name_pattern("startEvent")
USER_TASK_PATTERN = _name_pattern("userTask")
END_EVENT_PATTERN = _name_pattern("endEvent")


def find_names(pattern: "re.Pattern[str]", xml: str) -> List[str]:
    """All ``name`` attribute values matched by ``pattern``, unescaped."""
    return [unescape(match, _XML_ENTITIES) for match in pattern.findall(xml)]


def shorten(name: str, max_length: int) -> str:
    return name[:max_length] + "..." if len(name) > max_length else name


def to_ascii(source: Union[str, ProcessModel]) -> str:
    """Render the ASCII preview.

    Args:
        source: Generated BPMN XML, or a model (serialized to XML first)

    Returns:
        Banner, the condensed flow line, and a blank trailing line
    """
    if isinstance(source, ProcessModel):
        source = to_xml(source)

    starts = find_names(START_EVENT_PATTERN, source)
    tasks = find_names(USER_TASK_PATTERN, source)
    ends = find_names(END_EVENT_PATTERN, source)

    parts = []
    if starts:
        parts.append(f"{START_GLYPH} {shorten(starts[0], EVENT_NAME_MAX)}")
    parts.extend(f"{TASK_GLYPH} {shorten(task, TASK_NAME_MAX)}" for task in tasks)
    if ends:
        parts.append(f"{END_GLYPH} {shorten(ends[0], EVENT_NAME_MAX)}")

    logger.debug(f"ASCII preview: {len(starts)} starts, {len(tasks)} tasks, {len(ends)} ends")
    return "\n".join(["", BANNER, "", ARROW.join(parts), ""])


__all__ = [
    "ARROW",
    "BANNER",
    "EVENT_NAME_MAX",
    "TASK_NAME_MAX",
    "find_names",
    "shorten",
    "to_ascii",
]
