"""Per-session state and outcome of the agent loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel

from ..tools.models import ToolCallRequest
from ..tracing import AgentTrace


class AgentStatus(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    DISPATCHING = "dispatching"
    APPROVING = "approving"
    EXECUTING = "executing"
    FOLDING = "folding"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class AgentState:
    """Mutable state owned by one agent session and passed into every step."""

    iteration: int = 0
    retry_count: Dict[str, int] = field(default_factory=dict)
    total_tool_calls: int = 0
    failed_tool_calls: int = 0
    pending_approval: bool = False
    pending_tool_call: Optional[ToolCallRequest] = None
    status: AgentStatus = AgentStatus.IDLE


class OutcomeStatus(str, Enum):
    COMPLETED = "completed"
    TRUNCATED = "truncated"
    CANCELLED = "cancelled"
    FAILED = "failed"


class AgentOutcome(BaseModel):
    """
    What the end user receives from one agent run.

    Attributes:
        status: How the run ended.
        text: Final answer, or the labelled truncation/cancellation/failure text.
        turns: Number of completion requests issued.
        trace: The finished session trace.
    """

    status: OutcomeStatus
    text: str
    turns: int
    trace: Optional[AgentTrace] = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.COMPLETED
