"""
FastAPI application for the BPMN generator service.

Provides REST API endpoints for process generation, validation and
rendering.
"""

import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from bpmn_generator import __version__
from bpmn_generator.agent.orchestrator import BPMNGenerator
from bpmn_generator.api.routes import ApiException, request_id_for
from bpmn_generator.api.routes import router as process_router
from bpmn_generator.api.schemas import (
    ApiError,
    ApiResponse,
    ErrorCode,
    HealthCheckResponse,
    ServiceStatus,
)
from bpmn_generator.core.config import GeneratorConfig, OutputFormat
from bpmn_generator.core.exceptions import BPMNGeneratorError
from bpmn_generator.core.observability import ObservabilityConfig, ObservabilityManager

SERVICE_NAME = "BPMN Generator API"


def error_response(
    request: Request,
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[dict] = None,
) -> JSONResponse:
    body = ApiResponse(
        success=False,
        error=ApiError(code=code, message=message, details=details),
        request_id=request_id_for(request),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, mode="json"))


def create_app(config: Optional[GeneratorConfig] = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: Generator configuration (read from the environment when omitted)
    """
    config = config or GeneratorConfig.from_env()
    ObservabilityManager.initialize(
        ObservabilityConfig.from_generator_config(config, service_name="bpmn-generator-api")
    )

    app = FastAPI(
        title=SERVICE_NAME,
        description="REST API turning Japanese business-process text into BPMN 2.0",
        version=__version__,
    )
    app.state.config = config
    app.state.generator = BPMNGenerator(config)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiException)
    async def handle_api_exception(request: Request, exc: ApiException) -> JSONResponse:
        logger.warning(f"{exc.code.value}: {exc.message}")
        return error_response(request, exc.code, exc.message, exc.status_code, exc.details)

    @app.exception_handler(BPMNGeneratorError)
    async def handle_generator_error(request: Request, exc: BPMNGeneratorError) -> JSONResponse:
        logger.warning(f"Rejected request: {exc.message}")
        return error_response(request, ErrorCode.INVALID_INPUT, exc.message, 400, exc.details)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        missing = any(error.get("type") == "missing" for error in errors)
        code = ErrorCode.MISSING_REQUIRED_FIELD if missing else ErrorCode.INVALID_INPUT
        details = {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]}
        return error_response(request, code, "Request body is invalid", 400, details)

    # Include routers
    app.include_router(process_router)

    @app.get("/")
    async def root() -> dict:
        """Service information."""
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "docs": "/docs",
            "formats": [f.value for f in OutputFormat],
            "limits": {"maxTextLength": config.max_text_length},
        }

    @app.get("/health")
    async def health(request: Request) -> dict:
        """Run the pipeline on an empty input and report its status."""
        started = time.perf_counter()
        try:
            check = request.app.state.generator.health_check()
            generator_status = ServiceStatus(
                status="up" if check["status"] == "healthy" else "degraded",
                latency=round((time.perf_counter() - started) * 1000, 3),
            )
        except Exception as e:
            logger.exception(f"Health check failed: {e}")
            generator_status = ServiceStatus(status="down", error=str(e))

        overall = {"up": "healthy", "degraded": "degraded", "down": "unhealthy"}[
            generator_status.status
        ]
        return HealthCheckResponse(
            status=overall, services={"generator": generator_status}
        ).model_dump(by_alias=True, mode="json")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
