"""Trace records for agent sessions."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SpanResult(BaseModel):
    success: bool
    error: Optional[str] = None
    data_summary: Optional[str] = None


class ToolSpan(BaseModel):
    """One executed tool call attempt."""

    tool_name: str
    tool_call_id: str
    start_time: float
    end_time: Optional[float] = None
    duration_ms: Optional[float] = None
    input_args: Dict[str, Any] = Field(default_factory=dict)
    result: Optional[SpanResult] = None


class AgentIteration(BaseModel):
    """One model turn and the tool spans it produced."""

    index: int
    start_time: float
    end_time: Optional[float] = None
    tool_spans: List[ToolSpan] = Field(default_factory=list)


class AgentTrace(BaseModel):
    """The shape and timing of a whole agent session."""

    session_id: str
    start_time: float
    end_time: Optional[float] = None
    total_duration_ms: Optional[float] = None
    iterations: List[AgentIteration] = Field(default_factory=list)
    total_tool_calls: int = 0
    failed_tool_calls: int = 0
    final_success: bool = False


class ToolStats(BaseModel):
    count: int = 0
    total_ms: float = 0.0

    @property
    def average_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0
