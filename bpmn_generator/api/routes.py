"""
FastAPI REST endpoints for process generation.

Provides:
- Generation of BPMN XML/JSON from Japanese text
- Validation of bpmn-moddle style definitions documents
- Rendering of a single artifact (XML, JSON, SVG or ASCII)
"""

import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request

from bpmn_generator.agent.orchestrator import BPMNGenerator
from bpmn_generator.api.schemas import (
    ApiResponse,
    BPMNValidationRequest,
    ErrorCode,
    ProcessGenerationRequest,
    RenderRequest,
    new_request_id,
)
from bpmn_generator.core.config import GeneratorConfig, OutputFormat
from bpmn_generator.core.exceptions import BPMNGeneratorError
from bpmn_generator.core.observability import Timer, span
from bpmn_generator.generation import generate_model, render
from bpmn_generator.stages.layout import compute_layout
from bpmn_generator.stages.svg_rendering import svg_data_uri
from bpmn_generator.validation.graph_validator import ValidationReport, validate_definitions

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    OutputFormat.XML: "application/xml",
    OutputFormat.JSON: "application/json",
    OutputFormat.SVG: "image/svg+xml",
    OutputFormat.ASCII: "text/plain",
}


class ApiException(Exception):
    """Error that the app turns into an ApiResponse envelope."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details


# ===========================
# Helpers
# ===========================

router = APIRouter(prefix="/api/v1/process", tags=["process"])


def request_id_for(request: Request) -> str:
    """Caller-supplied X-Request-ID, or a fresh one."""
    return request.headers.get("x-request-id") or new_request_id()


def get_config(request: Request) -> GeneratorConfig:
    return request.app.state.config


def get_generator(request: Request) -> BPMNGenerator:
    return request.app.state.generator


def check_text(text: str, config: GeneratorConfig) -> None:
    """Reject input longer than the configured limit."""
    if len(text) > config.max_text_length:
        raise ApiException(
            ErrorCode.TEXT_TOO_LONG,
            f"Text is {len(text)} characters; the limit is {config.max_text_length}",
            status_code=413,
            details={"length": len(text), "maxTextLength": config.max_text_length},
        )


def report_payload(report: ValidationReport, skip_warnings: bool = False) -> Dict[str, Any]:
    payload = report.to_dict()
    if skip_warnings:
        payload["warnings"] = []
    return payload


def envelope(request_id: str, data: Any) -> Dict[str, Any]:
    return ApiResponse(success=True, data=data, request_id=request_id).model_dump(
        by_alias=True, mode="json"
    )


# ===========================
# Endpoints
# ===========================


@router.post("/generate")
async def generate_process(body: ProcessGenerationRequest, request: Request) -> Dict[str, Any]:
    """
    Generate a BPMN process from Japanese text.

    Returns the artifacts, the validation report and per-stage timings.
    """
    request_id = request_id_for(request)
    check_text(body.input.text, get_config(request))
    if body.input.language != "ja":
        raise ApiException(
            ErrorCode.UNSUPPORTED_LANGUAGE,
            f"Unsupported language: {body.input.language}. Only 'ja' is supported",
        )

    options = body.options
    started = time.perf_counter()
    try:
        result = get_generator(request).generate(body.input.text, options.format)
    except BPMNGeneratorError:
        raise
    except Exception as e:
        raise ApiException(
            ErrorCode.BPMN_GENERATION_ERROR,
            f"Generation failed: {str(e)}",
            status_code=500,
        ) from e
    processing_ms = (time.perf_counter() - started) * 1000

    validation = report_payload(result.validation, options.validation.skip_warnings)
    if options.validation.strict and not result.validation.is_valid:
        raise ApiException(
            ErrorCode.BPMN_VALIDATION_ERROR,
            "Generated process failed validation",
            status_code=422,
            details={"validation": validation},
        )

    logger.info(f"[{request_id}] generated '{result.process_name}' in {processing_ms:.1f}ms")
    return envelope(
        request_id,
        {
            "result": result.to_dict(),
            "validation": validation,
            "processingTime": round(processing_ms, 3),
            "metadata": {"processingSteps": result.steps},
        },
    )


@router.post("/validate")
async def validate_process(body: BPMNValidationRequest, request: Request) -> Dict[str, Any]:
    """Validate a bpmn-moddle style definitions document."""
    request_id = request_id_for(request)
    with span("api.validate"):
        report = validate_definitions(body.definitions)
    return envelope(request_id, {"validation": report.to_dict()})


@router.post("/render")
async def render_process(body: RenderRequest, request: Request) -> Dict[str, Any]:
    """Generate a process and render one artifact."""
    request_id = request_id_for(request)
    config = get_config(request)
    check_text(body.text, config)
    output_format = OutputFormat.parse(body.format)

    with span("api.render", {"format": output_format.value}), Timer("api_render"):
        model = generate_model(body.text, config.naming)
        content = render(model, compute_layout(model, config.layout), output_format)

    data: Dict[str, Any] = {
        "format": output_format.value,
        "mediaType": MEDIA_TYPES[output_format],
        "content": content,
    }
    if output_format == OutputFormat.SVG:
        data["dataUri"] = svg_data_uri(content, "base64")
    return envelope(request_id, data)


__all__ = ["ApiException", "router"]
