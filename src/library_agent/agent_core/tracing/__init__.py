"""Session tracing."""

from .models import AgentIteration, AgentTrace, SpanResult, ToolSpan, ToolStats
from .tracer import AgentTracer

__all__ = ["AgentTracer", "AgentIteration", "AgentTrace", "SpanResult", "ToolSpan", "ToolStats"]
