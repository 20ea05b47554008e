"""
BPMN Generator CLI Interface

Command-line tool for generating, rendering and validating BPMN models
from Japanese business-process text.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from bpmn_generator import __version__
from bpmn_generator.core.config import GeneratorConfig, OutputFormat
from bpmn_generator.core.exceptions import BPMNGeneratorError
from bpmn_generator.core.observability import ObservabilityConfig, ObservabilityManager
from bpmn_generator.generation import generate_model, render
from bpmn_generator.stages.layout import compute_layout
from bpmn_generator.validation.graph_validator import (
    GraphValidator,
    ValidationReport,
    validate_definitions,
)

logger = logging.getLogger(__name__)


@click.group()
def cli():
    """BPMN Generator CLI - Turn Japanese process descriptions into BPMN."""
    pass


@cli.command()
@click.argument("input_text", required=False)
@click.option(
    "--input-file",
    "-f",
    type=click.Path(exists=True, dir_okay=False),
    help="Read input from file instead of command line argument",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file path for the rendered artifact",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.XML.value,
    help="Artifact to render",
)
@click.option(
    "--report",
    is_flag=True,
    help="Print the validation summary to stderr",
)
@click.option(
    "--verbose/--quiet",
    default=False,
    help="Verbose logging output",
)
def generate(
    input_text: Optional[str],
    input_file: Optional[str],
    output: Optional[str],
    output_format: str,
    report: bool,
    verbose: bool,
) -> None:
    """
    Generate a BPMN artifact from Japanese process text.

    \b
    Examples:
        # Process text from command line
        bpmn-generator generate "申請を受け付ける。担当者が内容を確認する。"

        # Process from file into a file
        bpmn-generator generate -f process.txt -o diagram.bpmn

        # ASCII preview with the validation summary
        bpmn-generator generate -f process.txt --format ascii --report
    """
    config = _load_config()
    _setup_observability(config, verbose)

    # Get input text
    if input_file:
        try:
            text = Path(input_file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            click.echo(f"Error reading input file: {e}", err=True)
            sys.exit(1)
    elif input_text:
        text = input_text
    else:
        # Read from stdin if no input provided
        click.echo("Reading from stdin (press Ctrl+D to finish)...", err=True)
        text = sys.stdin.read()

    if not text.strip():
        click.echo("Error: No input text provided", err=True)
        sys.exit(1)

    if len(text) > config.max_text_length:
        click.echo(
            f"Error: Text is {len(text)} characters; the limit is {config.max_text_length}",
            err=True,
        )
        sys.exit(1)

    try:
        model = generate_model(text, config.naming)
        layout = compute_layout(model, config.layout)
        content = render(model, layout, output_format)
        validation = GraphValidator().validate(model)
    except Exception as e:
        logger.exception("Generation failed")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    _write_output(content, output, f"{output_format.upper()} output")

    if report:
        click.echo("\n--- Validation Summary ---", err=True)
        click.echo(validation.summary(), err=True)


@cli.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "report_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Report format",
)
def validate(input_file: str, report_format: str) -> None:
    """
    Validate a JSON definitions document or a process description.

    JSON files are validated as bpmn-moddle documents (the output of
    ``generate --format json``); any other file is read as process text and
    the generated model is validated. Exits with status 1 when invalid.

    \b
    Examples:
        bpmn-generator validate diagram.json
        bpmn-generator validate process.txt --format json
    """
    try:
        content = Path(input_file).read_text(encoding="utf-8")
        validation = _validate_content(content, _load_config())
    except (OSError, UnicodeDecodeError, BPMNGeneratorError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if report_format == "json":
        click.echo(json.dumps({"file": input_file, **validation.to_dict()}, indent=2, ensure_ascii=False))
    else:
        click.echo(f"File: {input_file}")
        click.echo(validation.summary())

    if not validation.is_valid:
        sys.exit(1)


@cli.command()
def info() -> None:
    """Show version and supported formats."""
    info_dict: Dict[str, Any] = {
        "name": "BPMN Generator",
        "version": __version__,
        "description": "Transform Japanese business-process text into BPMN 2.0",
        "formats": [f.value for f in OutputFormat],
        "features": {
            "pattern_extraction": True,
            "diagram_interchange": True,
            "structural_validation": True,
            "svg_preview": True,
        },
    }

    click.echo(json.dumps(info_dict, indent=2))


# ==================
# Helper Functions
# ==================


def _load_config() -> GeneratorConfig:
    try:
        return GeneratorConfig.from_env()
    except BPMNGeneratorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _setup_observability(config: GeneratorConfig, verbose: bool) -> None:
    """Route all logs for one CLI invocation to stderr through loguru."""
    overrides = {"log_level": "DEBUG"} if verbose else {}
    ObservabilityManager.reset()
    ObservabilityManager.initialize(
        ObservabilityConfig.from_generator_config(
            config, service_name="bpmn-generator-cli", enable_tracing=False, **overrides
        )
    )


def _validate_content(content: str, config: GeneratorConfig) -> ValidationReport:
    """Validate a JSON document, falling back to treating content as text."""
    try:
        document = json.loads(content)
    except json.JSONDecodeError:
        document = None

    if isinstance(document, dict):
        return validate_definitions(document)

    model = generate_model(content, config.naming)
    return GraphValidator().validate(model)


def _write_output(content: str, output_file: Optional[str], label: str) -> None:
    """Write to a file, or to stdout when no file is given."""
    if output_file:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(content)
        click.echo(f"{label} written to: {output_file}", err=True)
    else:
        click.echo(content)


if __name__ == "__main__":
    cli()
