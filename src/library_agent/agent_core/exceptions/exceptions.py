"""
Custom exception classes for the library agent.

This module defines the hierarchy of exceptions raised while registering,
validating, and executing tools, while talking to the completion endpoint,
and when a session is cancelled.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class FieldError:
    """A single schema violation, addressed by its dotted field path."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class AgentError(Exception):
    """Base exception for all agent errors."""

    pass


class ToolRegistrationError(AgentError):
    """Raised when a tool cannot be registered."""

    pass


class ToolNotFoundError(AgentError):
    """Raised when a requested tool is not found in the registry."""

    pass


class ToolValidationError(AgentError):
    """Raised when tool arguments or a tool definition are invalid.

    Attributes:
        errors: Field-level violations, suitable for feeding back to the model.
    """

    def __init__(self, message: str, errors: Optional[Sequence[FieldError]] = None) -> None:
        super().__init__(message)
        self.errors: List[FieldError] = list(errors or [])

    def format_errors(self) -> str:
        """Render the field errors as ``path: message; path: message``."""
        if not self.errors:
            return str(self)
        return "; ".join(str(error) for error in self.errors)


class ToolExecutionError(AgentError):
    """Raised when a tool fails during execution."""

    pass


class TransientToolError(ToolExecutionError):
    """Raised by tool implementations for failures worth retrying (network, timeouts)."""

    pass


class CompletionTransportError(AgentError):
    """Raised when the completion endpoint cannot be reached or answers with an error."""

    pass


class AgentCancelledError(AgentError):
    """Raised when a stream or session is cancelled.

    Attributes:
        partial_text: Text accumulated before the cancellation was observed.
    """

    def __init__(self, message: str = "Request was cancelled", partial_text: str = "") -> None:
        super().__init__(message)
        self.partial_text = partial_text


class RegistryInvariantError(AgentError):
    """Raised when the registry is in a state that cannot exist in a correct program."""

    pass
