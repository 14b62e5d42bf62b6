"""Expose provider-agnostic message model types shared by the agent loop and transports."""

from .models import BaseMessage, UserMessage, AssistantMessage, SystemMessage, ToolMessage, Conversation

__all__ = [
    "BaseMessage",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolMessage",
    "Conversation",
]
