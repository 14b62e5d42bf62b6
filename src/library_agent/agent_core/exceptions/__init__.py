"""Export the agent exception hierarchy used across validation, execution and streaming paths."""

from .exceptions import (
    AgentError,
    FieldError,
    ToolRegistrationError,
    ToolNotFoundError,
    ToolValidationError,
    ToolExecutionError,
    TransientToolError,
    CompletionTransportError,
    AgentCancelledError,
    RegistryInvariantError,
)

__all__ = [
    "AgentError",
    "FieldError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolValidationError",
    "ToolExecutionError",
    "TransientToolError",
    "CompletionTransportError",
    "AgentCancelledError",
    "RegistryInvariantError",
]
