"""
src/orchestrator/models.py

Pydantic models for the loop's state, its ledger entries and its results.
"""


from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from conversation.turns import ToolCallRequest, Transcript


class LoopState(str, Enum):

    RUNNING = "running"
    STOPPED = "stopped"


class StopReason(str, Enum):

    NORMAL = "normal"
    ERROR = "error"
    EMPTY_TOOL_CALLS = "empty_tool_call_anomaly"
    ITERATION_LIMIT = "iteration_limit_exceeded"
    CANCELLED = "cancelled"


class ToolCallOutcome(BaseModel):
    """One Call Ledger entry. `duration` is the tool's wall-clock time in seconds."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments: str
    result: Dict[str, Any]
    ok: bool
    duration: float


class Step(BaseModel):
    """What one loop iteration produced. `stop` is None while the run goes on."""

    model_config = ConfigDict(frozen=True)

    transcript: Transcript
    outcomes: Tuple[ToolCallOutcome, ...] = ()
    stop: Optional[StopReason] = None
    answer: Optional[str] = None


class RunResult(BaseModel):

    model_config = ConfigDict(frozen=True)

    stop_reason: StopReason
    transcript: Transcript
    ledger: Tuple[ToolCallOutcome, ...] = ()
    answer: Optional[str] = None
    error: Optional[str] = None
    iterations: int = 0

    @property
    def ok(self) -> bool:

        return self.stop_reason is StopReason.NORMAL


__all__ = [
    "LoopState",
    "RunResult",
    "Step",
    "StopReason",
    "ToolCallOutcome",
    "ToolCallRequest",
]
