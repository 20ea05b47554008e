"""
BPMN generator facade.

BPMNGenerator runs the whole pipeline in one call and records per-stage
results for callers such as the HTTP API and the CLI.
"""

from bpmn_generator.agent.orchestrator import (
    GENERATION_FORMATS,
    BPMNGenerator,
    GenerationResult,
    generate_bpmn,
)
from bpmn_generator.agent.state import GenerationState, StageResult, StageStatus

__all__ = [
    # Orchestrator
    "BPMNGenerator",
    "GenerationResult",
    "GENERATION_FORMATS",
    "generate_bpmn",
    # State
    "GenerationState",
    "StageResult",
    "StageStatus",
]
