"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from bpmn_generator.generation import generate_model
from bpmn_generator.stages.json_generation import to_json
from bpmn_generator.tools.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


class TestGenerateCommand:
    def test_xml_to_stdout(self, runner, scenario_text):
        result = runner.invoke(cli, ["generate", scenario_text])

        assert result.exit_code == 0
        assert "<bpmn:definitions" in result.output
        assert 'name="担当者が内容を確認"' in result.output

    def test_ascii_format(self, runner, scenario_text):
        result = runner.invoke(cli, ["generate", scenario_text, "--format", "ascii"])

        assert result.exit_code == 0
        assert "🟢 申請を受け付け ─► 📋 担当者が内容を確認 ─► 🔴 承認されたら通知" in result.output

    def test_output_file(self, runner, scenario_text, tmp_path):
        target = tmp_path / "diagram.json"
        result = runner.invoke(cli, ["generate", scenario_text, "--format", "json", "-o", str(target)])

        assert result.exit_code == 0
        assert "JSON output written to" in result.output
        document = json.loads(target.read_text(encoding="utf-8"))
        assert document["definitions"]["rootElements"][0]["name"] == "申請を受け付けるプロセス"

    def test_input_file(self, runner, scenario_text, tmp_path):
        source = tmp_path / "process.txt"
        source.write_text(scenario_text, encoding="utf-8")
        result = runner.invoke(cli, ["generate", "-f", str(source), "--format", "svg"])

        assert result.exit_code == 0
        assert "<svg" in result.output

    def test_report(self, runner, scenario_text):
        result = runner.invoke(cli, ["generate", scenario_text, "--report"])

        assert result.exit_code == 0
        assert "--- Validation Summary ---" in result.output
        assert "Validation: valid (0 errors, 0 warnings)" in result.output

    def test_empty_text(self, runner):
        result = runner.invoke(cli, ["generate", "   "])

        assert result.exit_code == 1
        assert "No input text provided" in result.output

    def test_text_too_long(self, runner, monkeypatch):
        monkeypatch.setenv("BPMN_MAX_TEXT_LENGTH", "5")
        result = runner.invoke(cli, ["generate", "内容を確認する。"])

        assert result.exit_code == 1
        assert "the limit is 5" in result.output

    def test_invalid_environment(self, runner, monkeypatch):
        monkeypatch.setenv("BPMN_LOG_LEVEL", "LOUD")
        result = runner.invoke(cli, ["generate", "内容を確認する。"])
        assert result.exit_code == 1

    def test_unknown_format_rejected(self, runner):
        result = runner.invoke(cli, ["generate", "内容を確認する。", "--format", "pdf"])
        assert result.exit_code == 2


class TestValidateCommand:
    def test_valid_document(self, runner, scenario_text, tmp_path):
        path = tmp_path / "diagram.json"
        path.write_text(json.dumps(to_json(generate_model(scenario_text))), encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 0
        assert f"File: {path}" in result.output
        assert "Validation: valid" in result.output

    def test_invalid_document_exits_nonzero(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"definitions": {"id": "d", "rootElements": []}}), encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path)])

        assert result.exit_code == 1
        assert "NO_ROOT_ELEMENTS" in result.output

    def test_text_file(self, runner, scenario_text, tmp_path):
        path = tmp_path / "process.txt"
        path.write_text(scenario_text, encoding="utf-8")

        result = runner.invoke(cli, ["validate", str(path), "--format", "json"])

        assert result.exit_code == 0
        assert '"isValid": true' in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["validate", str(tmp_path / "nope.json")])
        assert result.exit_code == 2


class TestInfoCommand:
    def test_info(self, runner):
        result = runner.invoke(cli, ["info"])
        data = json.loads(result.output)

        assert result.exit_code == 0
        assert data["name"] == "BPMN Generator"
        assert data["formats"] == ["xml", "json", "svg", "ascii"]
