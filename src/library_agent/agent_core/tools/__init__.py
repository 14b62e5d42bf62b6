from .models import Sensitivity, ToolCallRequest, ToolDefinition, ToolHandler, ToolName, ToolResult
from .registry import CATALOGUE, ToolRegistry, build_registry
from .schema import SchemaValidator

__all__ = [
    "Sensitivity",
    "ToolCallRequest",
    "ToolDefinition",
    "ToolHandler",
    "ToolName",
    "ToolResult",
    "CATALOGUE",
    "ToolRegistry",
    "build_registry",
    "SchemaValidator",
]
