"""Provider-agnostic message models for the agent conversation."""

from abc import ABC
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class BaseMessage(ABC, BaseModel):
    """Base model for messages exchanged with the model.

    Attributes:
        author: Role associated with the message.
        content: Text payload of the message.
    """

    author: str
    content: str


class SystemMessage(BaseMessage):
    """Message authored by the system to steer behavior."""

    author: str = "system"


class UserMessage(BaseMessage):
    """Message authored by an end user."""

    author: str = "user"


class AssistantMessage(BaseMessage):
    """Message authored by the assistant, optionally containing tool calls.

    ``tool_calls`` holds the wire-format entries
    ``{"id", "type": "function", "function": {"name", "arguments"}}``.
    """

    author: str = "assistant"
    tool_calls: Optional[List[Dict[str, Any]]] = None


class ToolMessage(BaseMessage):
    """Message carrying a serialized tool result back to the model."""

    author: str = "tool"
    tool_call_id: str
    name: str


class Conversation(BaseModel):
    """Append-only, role-tagged message log shared by the assembler and the executor."""

    messages: List[BaseMessage] = Field(default_factory=list)

    def append(self, message: BaseMessage) -> None:
        self.messages.append(message)

    def extend(self, messages: List[BaseMessage]) -> None:
        self.messages.extend(messages)

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def last(self) -> Optional[BaseMessage]:
        return self.messages[-1] if self.messages else None
