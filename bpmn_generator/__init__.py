"""
BPMN Generator: Japanese business-process text to BPMN 2.0 models.

Pattern rules extract start events, tasks, gateways and end events from
text; the elements are chained into a linear process, laid out left to
right, validated, and serialized as BPMN XML, bpmn-moddle JSON, an SVG
preview or an ASCII preview.
"""

__version__ = "0.1.0"

from bpmn_generator.agent import BPMNGenerator, GenerationResult, generate_bpmn
from bpmn_generator.core import (
    BPMNGeneratorError,
    ConfigurationError,
    GeneratorConfig,
    LayoutConfig,
    NamingConfig,
    OutputFormat,
    UnsupportedFormatError,
)
from bpmn_generator.generation import (
    compute_layout,
    generate_model,
    render,
    to_ascii,
    to_json,
    to_svg,
    to_xml,
    validate,
)
from bpmn_generator.models import (
    Bounds,
    Element,
    ElementKind,
    ElementSet,
    Flow,
    LayoutInfo,
    ProcessModel,
    Waypoint,
)
from bpmn_generator.stages.svg_rendering import svg_data_uri, to_simple_svg
from bpmn_generator.validation import (
    GraphValidator,
    ValidationIssue,
    ValidationReport,
    ValidationRule,
    validate_definitions,
)

__all__ = [
    "__version__",
    # Core functions
    "generate_model",
    "compute_layout",
    "validate",
    "validate_definitions",
    "to_xml",
    "to_json",
    "to_svg",
    "to_simple_svg",
    "svg_data_uri",
    "to_ascii",
    "render",
    # Facade
    "BPMNGenerator",
    "GenerationResult",
    "generate_bpmn",
    # Models
    "Element",
    "ElementKind",
    "ElementSet",
    "Flow",
    "ProcessModel",
    "Bounds",
    "Waypoint",
    "LayoutInfo",
    # Validation
    "GraphValidator",
    "ValidationIssue",
    "ValidationReport",
    "ValidationRule",
    # Configuration and errors
    "GeneratorConfig",
    "LayoutConfig",
    "NamingConfig",
    "OutputFormat",
    "BPMNGeneratorError",
    "ConfigurationError",
    "UnsupportedFormatError",
]
