"""
Generation pipeline stages.

Stage 1: Pattern extraction (text -> ElementSet)
Stage 2: Flow assembly (ElementSet -> ProcessModel)
Stage 3: Layout (ProcessModel -> LayoutInfo)
Stage 4: Serialization (XML, JSON, SVG, ASCII)
"""

from .ascii_preview import to_ascii
from .flow_assembly import FlowAssembler, chain_flows
from .json_generation import to_json
from .layout import LayoutEngine, compute_layout
from .pattern_extraction import (
    CATEGORY_SPECS,
    DEFAULT_RULES,
    PatternExtractor,
    PatternRule,
    clean_label,
    extract_elements,
    extract_process_name,
    truncate_label,
)
from .svg_rendering import svg_data_uri, to_simple_svg, to_svg
from .xml_generation import BPMNXMLGenerator, to_xml

__all__ = [
    "CATEGORY_SPECS",
    "DEFAULT_RULES",
    "PatternExtractor",
    "PatternRule",
    "clean_label",
    "extract_elements",
    "extract_process_name",
    "truncate_label",
    "FlowAssembler",
    "chain_flows",
    "LayoutEngine",
    "compute_layout",
    "BPMNXMLGenerator",
    "to_xml",
    "to_json",
    "to_svg",
    "to_simple_svg",
    "svg_data_uri",
    "to_ascii",
]
