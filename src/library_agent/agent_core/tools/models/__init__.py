"""Tool-related data models."""

from .models import Sensitivity, ToolDefinition, ToolHandler, ToolName, ToolResult
from .tool_call import ToolCallRequest

__all__ = ["Sensitivity", "ToolDefinition", "ToolHandler", "ToolName", "ToolResult", "ToolCallRequest"]
