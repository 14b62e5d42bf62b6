"""A tool-using research agent for document libraries."""

from .agent_core import (
    AgentConfig,
    AgentLoop,
    AgentOutcome,
    CancelToken,
    Conversation,
    ModelConfig,
    OutcomeStatus,
    SystemMessage,
    UserMessage,
    run_agent_turn,
)

__version__ = "0.1.0"

__all__ = [
    "AgentConfig",
    "AgentLoop",
    "AgentOutcome",
    "CancelToken",
    "Conversation",
    "ModelConfig",
    "OutcomeStatus",
    "SystemMessage",
    "UserMessage",
    "run_agent_turn",
]
