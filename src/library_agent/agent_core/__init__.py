"""Provider-agnostic core of the library research agent."""

from .agent import AgentLoop, AgentOutcome, CompletionTransport, OutcomeStatus, run_agent_turn
from .config import AgentConfig, AgentSettings, LibraryScope, ModelConfig, RateLimitKind, RateLimitPolicy
from .exceptions import AgentError
from .logger import get_logger, setup_logging
from .messages import AssistantMessage, Conversation, SystemMessage, ToolMessage, UserMessage
from .rate_limit import RateLimiter
from .streaming import CancelToken, CompletionChunk, StreamAssembler, ToolCallFragment
from .tools import Sensitivity, ToolDefinition, ToolName, ToolRegistry, ToolResult, build_registry
from .tracing import AgentTracer, AgentTrace

__all__ = [
    "AgentLoop",
    "AgentOutcome",
    "CompletionTransport",
    "OutcomeStatus",
    "run_agent_turn",
    "AgentConfig",
    "AgentSettings",
    "LibraryScope",
    "ModelConfig",
    "RateLimitKind",
    "RateLimitPolicy",
    "AgentError",
    "get_logger",
    "setup_logging",
    "AssistantMessage",
    "Conversation",
    "SystemMessage",
    "ToolMessage",
    "UserMessage",
    "RateLimiter",
    "CancelToken",
    "CompletionChunk",
    "StreamAssembler",
    "ToolCallFragment",
    "Sensitivity",
    "ToolDefinition",
    "ToolName",
    "ToolRegistry",
    "ToolResult",
    "build_registry",
    "AgentTracer",
    "AgentTrace",
]
