"""
Request/response models for the HTTP API.

Every endpoint answers with the same envelope: ``success``, ``data`` or
``error``, ``timestamp`` and ``requestId``. Field names on the wire are
camelCase.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_request_id() -> str:
    return uuid.uuid4().hex


class ErrorCode(str, Enum):
    """Error codes carried in ApiError."""

    # System
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"

    # Request
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # BPMN
    BPMN_VALIDATION_ERROR = "BPMN_VALIDATION_ERROR"
    BPMN_GENERATION_ERROR = "BPMN_GENERATION_ERROR"
    INVALID_BPMN_STRUCTURE = "INVALID_BPMN_STRUCTURE"

    # Text
    UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"
    TEXT_TOO_LONG = "TEXT_TOO_LONG"


# ===========================
# Envelope
# ===========================


class ApiError(BaseModel):
    """Error information."""

    code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str = Field(default_factory=utc_timestamp)


class ApiResponse(BaseModel):
    """Response envelope shared by all endpoints."""

    success: bool
    data: Optional[Any] = None
    error: Optional[ApiError] = None
    timestamp: str = Field(default_factory=utc_timestamp)
    request_id: Optional[str] = Field(None, alias="requestId")

    model_config = ConfigDict(populate_by_name=True)


# ===========================
# Requests
# ===========================


class ProcessInput(BaseModel):
    """Text to turn into a process."""

    text: str = Field(..., description="Japanese business-process description")
    context: Optional[str] = Field(None, description="Free-form caller context")
    language: Literal["ja", "en"] = Field("ja", description="Input language")


class ValidationOptions(BaseModel):
    """How validation results affect the response."""

    strict: bool = Field(False, description="Fail the request when the model has errors")
    skip_warnings: bool = Field(False, alias="skipWarnings", description="Omit warnings")

    model_config = ConfigDict(populate_by_name=True)


class GenerationOptions(BaseModel):
    """Generation options."""

    format: Literal["xml", "json", "both"] = Field("both", description="Artifacts to return")
    validation: ValidationOptions = Field(default_factory=ValidationOptions)


class ProcessGenerationRequest(BaseModel):
    """Body of POST /api/v1/process/generate."""

    input: ProcessInput
    options: GenerationOptions = Field(default_factory=GenerationOptions)


class BPMNValidationRequest(BaseModel):
    """Body of POST /api/v1/process/validate."""

    definitions: Dict[str, Any] = Field(..., description="bpmn-moddle style definitions document")


class RenderRequest(BaseModel):
    """Body of POST /api/v1/process/render."""

    text: str = Field(..., description="Japanese business-process description")
    format: str = Field("xml", description="xml, json, svg or ascii")


# ===========================
# Health
# ===========================


class ServiceStatus(BaseModel):
    """Status of one internal service."""

    status: Literal["up", "down", "degraded"]
    latency: Optional[float] = None
    error: Optional[str] = None
    last_check: str = Field(default_factory=utc_timestamp, alias="lastCheck")

    model_config = ConfigDict(populate_by_name=True)


class HealthCheckResponse(BaseModel):
    """Body of GET /health."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: Dict[str, ServiceStatus] = Field(default_factory=dict)
    timestamp: str = Field(default_factory=utc_timestamp)


__all__ = [
    "ErrorCode",
    "ApiError",
    "ApiResponse",
    "ProcessInput",
    "ValidationOptions",
    "GenerationOptions",
    "ProcessGenerationRequest",
    "BPMNValidationRequest",
    "RenderRequest",
    "ServiceStatus",
    "HealthCheckResponse",
    "new_request_id",
    "utc_timestamp",
]
