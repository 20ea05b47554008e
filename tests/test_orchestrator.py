"""
Tests for the BPMNGenerator facade.

Tests:
- Output format selection
- Element counts and processing steps
- Stage failure reporting
- Custom validation rules
"""

import pytest

from bpmn_generator.agent import BPMNGenerator, GenerationResult, generate_bpmn
from bpmn_generator.agent.state import GenerationState, StageResult, StageStatus
from bpmn_generator.core.config import GeneratorConfig, NamingConfig
from bpmn_generator.core.exceptions import UnsupportedFormatError
from bpmn_generator.validation.graph_validator import ValidationIssue, ValidationRule

STAGES = [
    "pattern_extraction",
    "flow_assembly",
    "layout",
    "validation",
    "xml_generation",
    "json_generation",
    "ascii_preview",
]


@pytest.fixture
def generator():
    return BPMNGenerator()


class TestOutputFormats:
    def test_both(self, generator, scenario_text):
        result = generator.generate(scenario_text)

        assert isinstance(result, GenerationResult)
        assert result.xml.startswith("<?xml")
        assert result.json_document["definitions"]["id"] == "Definitions_1"

    def test_xml_only(self, generator, scenario_text):
        result = generator.generate(scenario_text, output_format="xml")
        assert result.xml is not None
        assert result.json_document is None

    def test_json_only_still_has_preview(self, generator, scenario_text):
        result = generator.generate(scenario_text, output_format="json")

        assert result.xml is None
        assert result.json_document is not None
        assert "📋 担当者が内容を確認" in result.ascii_preview

    def test_invalid_format(self, generator, scenario_text):
        with pytest.raises(UnsupportedFormatError):
            generator.generate(scenario_text, output_format="svg")


class TestResult:
    def test_counts(self, generator, branching_text):
        result = generator.generate(branching_text)
        assert result.elements_count == {"start_events": 1, "tasks": 2, "gateways": 1, "end_events": 1}

    def test_steps_in_order(self, generator, scenario_text):
        result = generator.generate(scenario_text)

        assert [s["step"] for s in result.steps] == STAGES
        assert all(s["success"] for s in result.steps)
        assert all(s["duration"] >= 0 for s in result.steps)

    def test_xml_only_skips_json_stage(self, generator, scenario_text):
        result = generator.generate(scenario_text, output_format="xml")
        assert "json_generation" not in [s["step"] for s in result.steps]

    def test_to_dict(self, generator, scenario_text):
        data = generator.generate(scenario_text).to_dict()

        assert data["processName"] == "申請を受け付けるプロセス"
        assert data["elementsCount"] == {"startEvents": 1, "tasks": 1, "gateways": 0, "endEvents": 1}
        assert data["validation"]["isValid"] is True
        assert set(data) == {"processName", "elementsCount", "validation", "asciiPreview", "xml", "json"}

    def test_to_dict_omits_missing_artifacts(self, generator, scenario_text):
        data = generator.generate(scenario_text, output_format="xml").to_dict()
        assert "json" not in data

    def test_naming_config(self):
        config = GeneratorConfig(naming=NamingConfig(process_name_max=3))
        result = BPMNGenerator(config).generate("申請を受け付ける。")
        assert result.process_name == "申請を...プロセス"


class TestStageFailure:
    def test_failure_is_raised(self, generator, monkeypatch):
        def explode(model):
            raise RuntimeError("layout exploded")

        monkeypatch.setattr(generator.layout_engine, "layout", explode)
        with pytest.raises(RuntimeError, match="layout exploded"):
            generator.generate("内容を確認する。")

    def test_state_records_failure(self):
        state = GenerationState()
        state.add_stage_result(StageResult(stage_name="a", status=StageStatus.COMPLETED, duration_ms=1.5))
        state.add_stage_result(StageResult(stage_name="b", status=StageStatus.FAILED, error="x"))

        assert state.total_duration_ms == 1.5
        assert state.steps() == [
            {"step": "a", "duration": 1.5, "success": True},
            {"step": "b", "duration": 0.0, "success": False},
        ]


class TestRules:
    def test_custom_rule_reaches_report(self, scenario_text):
        rule = ValidationRule(
            name="always",
            check=lambda records: [ValidationIssue(code="CUSTOM", message="custom")],
        )
        result = BPMNGenerator(rules=[rule]).generate(scenario_text)

        assert result.validation.error_codes == ["CUSTOM"]
        assert not result.validation.is_valid


class TestHelpers:
    def test_generate_bpmn(self, scenario_text):
        result = generate_bpmn(scenario_text, "xml")
        assert result.process_name == "申請を受け付けるプロセス"

    def test_health_check(self, generator):
        assert generator.health_check() == {"status": "healthy", "elements": 3}
