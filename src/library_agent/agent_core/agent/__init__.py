"""The provider-agnostic agent loop."""

from .loop import AgentLoop, PermissionHandler, is_transient_error, run_agent_turn, serialize_tool_result
from .state import AgentOutcome, AgentState, AgentStatus, OutcomeStatus
from .transport import CompletionTransport

__all__ = [
    "AgentLoop",
    "PermissionHandler",
    "is_transient_error",
    "run_agent_turn",
    "serialize_tool_result",
    "AgentOutcome",
    "AgentState",
    "AgentStatus",
    "OutcomeStatus",
    "CompletionTransport",
]
