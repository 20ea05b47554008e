"""
Core generation functions.

Pure, stateless functions composing the pipeline stages. Every call builds
its own model, so independent calls may run in parallel.
"""

import json
import logging
from typing import Optional, Sequence, Union

from bpmn_generator.core.config import NamingConfig, OutputFormat
from bpmn_generator.core.observability import log_execution
from bpmn_generator.models.bpmn_elements import ProcessModel
from bpmn_generator.models.diagram import LayoutInfo
from bpmn_generator.stages.ascii_preview import to_ascii
from bpmn_generator.stages.flow_assembly import FlowAssembler
from bpmn_generator.stages.json_generation import to_json
from bpmn_generator.stages.layout import compute_layout
from bpmn_generator.stages.pattern_extraction import PatternExtractor
from bpmn_generator.stages.svg_rendering import to_svg
from bpmn_generator.stages.xml_generation import to_xml
from bpmn_generator.validation.graph_validator import (
    GraphValidator,
    ValidationReport,
    ValidationRule,
)

logger = logging.getLogger(__name__)


def generate_model(text: str, naming: Optional[NamingConfig] = None) -> ProcessModel:
    """Extract elements from text and chain them into a process model.

    Args:
        text: Japanese business-process description (may be empty)
        naming: Label truncation settings

    Returns:
        ProcessModel; never empty thanks to the fallback defaults
    """
    process_name, elements = PatternExtractor(naming=naming).extract(text)
    model = FlowAssembler().assemble(elements, process_name)
    logger.info(
        f"Generated model '{model.process_name}': "
        f"{len(model.elements)} elements, {len(model.flows)} flows"
    )
    return model


def validate(
    model: ProcessModel, rules: Optional[Sequence[ValidationRule]] = None
) -> ValidationReport:
    """Validate a model's structure (advisory, never raises)."""
    return GraphValidator(rules).validate(model)


@log_execution(include_result=False)
def render(
    model: ProcessModel,
    layout: Optional[LayoutInfo] = None,
    fmt: Union[str, OutputFormat] = OutputFormat.XML,
) -> str:
    """Render one artifact as text.

    Args:
        model: Process model
        layout: Layout to use (computed with defaults when omitted)
        fmt: ``xml``, ``json``, ``svg`` or ``ascii``

    Raises:
        UnsupportedFormatError: If the format is unknown
    """
    output_format = OutputFormat.parse(fmt)
    if layout is None:
        layout = compute_layout(model)

    if output_format == OutputFormat.XML:
        return to_xml(model, layout)
    if output_format == OutputFormat.JSON:
        return json.dumps(to_json(model, layout), ensure_ascii=False, indent=2)
    if output_format == OutputFormat.SVG:
        return to_svg(model)
    return to_ascii(to_xml(model, layout))


__all__ = [
    "compute_layout",
    "generate_model",
    "render",
    "to_ascii",
    "to_json",
    "to_svg",
    "to_xml",
    "validate",
]
