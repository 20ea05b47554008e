"""
BPMN Generator Orchestrator

One-call facade over the generation pipeline: text in, BPMN artifacts,
element counts, a validation report and an ASCII preview out. Each stage
runs inside a tracing span and a Timer, and its outcome is recorded as a
StageResult.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from bpmn_generator.agent.state import GenerationState, StageResult, StageStatus
from bpmn_generator.core.config import GeneratorConfig
from bpmn_generator.core.exceptions import UnsupportedFormatError
from bpmn_generator.core.observability import Timer, record_metric, span
from bpmn_generator.models.bpmn_elements import ProcessModel
from bpmn_generator.models.diagram import LayoutInfo
from bpmn_generator.stages.ascii_preview import to_ascii
from bpmn_generator.stages.flow_assembly import FlowAssembler
from bpmn_generator.stages.json_generation import to_json
from bpmn_generator.stages.layout import LayoutEngine
from bpmn_generator.stages.pattern_extraction import PatternExtractor
from bpmn_generator.stages.xml_generation import to_xml
from bpmn_generator.validation.graph_validator import (
    GraphValidator,
    ValidationReport,
    ValidationRule,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

GENERATION_FORMATS = ("xml", "json", "both")

_COUNT_KEYS = {
    "start_events": "startEvents",
    "tasks": "tasks",
    "gateways": "gateways",
    "end_events": "endEvents",
}


class GenerationResult(BaseModel):
    """Everything produced by one generation call."""

    process_name: str = Field(..., description="Derived process name")
    xml: Optional[str] = Field(None, description="BPMN 2.0 XML (xml/both formats)")
    json_document: Optional[Dict[str, Any]] = Field(
        None, description="bpmn-moddle style document (json/both formats)"
    )
    elements_count: Dict[str, int] = Field(default_factory=dict, description="Counts per category")
    validation: ValidationReport = Field(default_factory=ValidationReport)
    ascii_preview: str = Field("", description="Condensed text preview")
    model: ProcessModel = Field(..., description="Generated process model")
    layout: LayoutInfo = Field(default_factory=LayoutInfo, description="Diagram layout")
    steps: List[Dict[str, Any]] = Field(default_factory=list, description="Processing steps")

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def to_dict(self) -> Dict[str, Any]:
        """camelCase payload for the HTTP API."""
        data: Dict[str, Any] = {
            "processName": self.process_name,
            "elementsCount": {_COUNT_KEYS[k]: v for k, v in self.elements_count.items()},
            "validation": self.validation.to_dict(),
            "asciiPreview": self.ascii_preview,
        }
        if self.xml is not None:
            data["xml"] = self.xml
        if self.json_document is not None:
            data["json"] = self.json_document
        return data


class BPMNGenerator:
    """
    Main BPMN generator.

    Runs the pipeline:
    1. Pattern extraction
    2. Flow assembly
    3. Layout
    4. Validation
    5. Serialization (XML and/or JSON, plus the ASCII preview)
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        rules: Optional[List[ValidationRule]] = None,
    ):
        """Initialize the generator.

        Args:
            config: Generator configuration (defaults apply when omitted)
            rules: Custom validation rules run after the built-in checks
        """
        self.config = config or GeneratorConfig()
        self.extractor = PatternExtractor(naming=self.config.naming)
        self.assembler = FlowAssembler()
        self.layout_engine = LayoutEngine(self.config.layout)
        self.validator = GraphValidator(rules)

    def generate(self, text: str, output_format: str = "both") -> GenerationResult:
        """Generate BPMN artifacts from Japanese process text.

        Args:
            text: Business-process description
            output_format: ``xml``, ``json`` or ``both``

        Returns:
            GenerationResult

        Raises:
            UnsupportedFormatError: If output_format is unknown
        """
        if output_format not in GENERATION_FORMATS:
            raise UnsupportedFormatError(output_format, GENERATION_FORMATS)

        state = GenerationState()
        with span("bpmn_generator.generate", {"text_length": len(text or "")}):
            process_name, elements = self._run_stage(
                state, "pattern_extraction", self.extractor.extract, text
            )
            model = self._run_stage(
                state, "flow_assembly", self.assembler.assemble, elements, process_name
            )
            layout = self._run_stage(state, "layout", self.layout_engine.layout, model)
            report = self._run_stage(state, "validation", self.validator.validate, model)
            xml = self._run_stage(state, "xml_generation", to_xml, model, layout)

            json_document = None
            if output_format in ("json", "both"):
                json_document = self._run_stage(state, "json_generation", to_json, model, layout)

            ascii_preview = self._run_stage(state, "ascii_preview", to_ascii, xml)

        record_metric("generations_total", 1, {"valid": str(report.is_valid).lower()})
        logger.info(
            f"Generated '{process_name}' in {state.total_duration_ms:.1f}ms: "
            f"{len(model.elements)} elements, {len(report.errors)} errors, "
            f"{len(report.warnings)} warnings"
        )

        return GenerationResult(
            process_name=process_name,
            xml=xml if output_format in ("xml", "both") else None,
            json_document=json_document,
            elements_count=elements.counts(),
            validation=report,
            ascii_preview=ascii_preview,
            model=model,
            layout=layout,
            steps=state.steps(),
        )

    def _run_stage(
        self, state: GenerationState, stage_name: str, func: Callable[..., T], *args: Any
    ) -> T:
        """Run one stage under a span and Timer, recording its StageResult."""
        timer = Timer(stage_name)
        try:
            with span(f"bpmn_generator.{stage_name}"), timer:
                value = func(*args)
        except Exception as e:
            logger.exception(f"Stage {stage_name} failed: {e}")
            state.add_stage_result(
                StageResult(
                    stage_name=stage_name,
                    status=StageStatus.FAILED,
                    duration_ms=timer.elapsed_ms,
                    error=str(e),
                )
            )
            raise

        state.add_stage_result(
            StageResult(
                stage_name=stage_name,
                status=StageStatus.COMPLETED,
                duration_ms=timer.elapsed_ms,
            )
        )
        return value

    def health_check(self) -> Dict[str, Any]:
        """Check that the pipeline runs end to end on an empty input."""
        result = self.generate("", output_format="xml")
        return {
            "status": "healthy" if result.validation.is_valid else "degraded",
            "elements": len(result.model.elements),
        }


def generate_bpmn(
    text: str, output_format: str = "both", config: Optional[GeneratorConfig] = None
) -> GenerationResult:
    """Convenience function for one-off generation."""
    return BPMNGenerator(config).generate(text, output_format)


__all__ = ["GENERATION_FORMATS", "BPMNGenerator", "GenerationResult", "generate_bpmn"]
