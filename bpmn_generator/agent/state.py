"""
Generation State

Per-call record of the pipeline stages a generation ran through.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class StageStatus(str, Enum):
    """Status of a pipeline stage."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class StageResult:
    """Result from a single pipeline stage."""

    stage_name: str
    status: StageStatus
    duration_ms: float = 0.0
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == StageStatus.COMPLETED

    def to_step(self) -> Dict[str, Any]:
        """Processing-step record as reported by the HTTP API."""
        return {
            "step": self.stage_name,
            "duration": round(self.duration_ms, 3),
            "success": self.is_success,
        }


@dataclass
class GenerationState:
    """Stage results of one generation call, in execution order."""

    stage_results: List[StageResult] = field(default_factory=list)

    def add_stage_result(self, result: StageResult) -> None:
        self.stage_results.append(result)

    @property
    def total_duration_ms(self) -> float:
        return sum(r.duration_ms for r in self.stage_results)

    def steps(self) -> List[Dict[str, Any]]:
        return [r.to_step() for r in self.stage_results]


__all__ = ["StageStatus", "StageResult", "GenerationState"]
