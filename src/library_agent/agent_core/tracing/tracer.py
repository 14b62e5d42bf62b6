"""Passive observer recording per-turn and per-tool-call timing for agent sessions."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .models import AgentIteration, AgentTrace, SpanResult, ToolSpan, ToolStats
from ..logger import get_logger

logger = get_logger(__name__)


class AgentTracer:
    """
    Tracks active sessions, their current iteration and open tool spans.

    Every update for an unknown session, iteration or span is a no-op, so a
    tracer can never interfere with the loop it observes. ``end_session``
    hands the finished trace back and forgets it.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._traces: Dict[str, AgentTrace] = {}
        self._iterations: Dict[str, AgentIteration] = {}
        self._spans: Dict[Tuple[str, str], ToolSpan] = {}

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def start_session(self, session_id: str) -> None:
        self._traces[session_id] = AgentTrace(session_id=session_id, start_time=self._now_ms())
        logger.debug(f"Trace session started: {session_id}")

    def start_iteration(self, session_id: str, index: int) -> None:
        if session_id not in self._traces:
            return
        if session_id in self._iterations:
            self.end_iteration(session_id)
        self._iterations[session_id] = AgentIteration(index=index, start_time=self._now_ms())

    def end_iteration(self, session_id: str) -> None:
        iteration = self._iterations.pop(session_id, None)
        trace = self._traces.get(session_id)
        if iteration is None or trace is None:
            return
        iteration.end_time = self._now_ms()
        trace.iterations.append(iteration)

    def start_tool_span(
        self, session_id: str, tool_call_id: str, tool_name: str, input_args: Optional[Mapping[str, Any]] = None
    ) -> None:
        trace = self._traces.get(session_id)
        if trace is None:
            return
        self._spans[(session_id, tool_call_id)] = ToolSpan(
            tool_name=tool_name,
            tool_call_id=tool_call_id,
            start_time=self._now_ms(),
            input_args=dict(input_args or {}),
        )
        trace.total_tool_calls += 1

    def end_tool_span(
        self,
        session_id: str,
        tool_call_id: str,
        success: bool,
        error: Optional[str] = None,
        data_summary: Optional[str] = None,
    ) -> None:
        span = self._spans.pop((session_id, tool_call_id), None)
        if span is None:
            return

        span.end_time = self._now_ms()
        span.duration_ms = span.end_time - span.start_time
        span.result = SpanResult(success=success, error=error, data_summary=data_summary)

        iteration = self._iterations.get(session_id)
        if iteration is not None:
            iteration.tool_spans.append(span)

        trace = self._traces.get(session_id)
        if trace is not None and not success:
            trace.failed_tool_calls += 1

        status = "ok" if success else "failed"
        logger.debug(f"Tool span {status}: {span.tool_name} ({span.duration_ms:.0f}ms)")

    def end_session(self, session_id: str, success: bool) -> Optional[AgentTrace]:
        """Finalize the session, release it from tracking and return its trace."""
        trace = self._traces.get(session_id)
        if trace is None:
            return None

        self.end_iteration(session_id)
        for key in [key for key in self._spans if key[0] == session_id]:
            del self._spans[key]

        trace.end_time = self._now_ms()
        trace.total_duration_ms = trace.end_time - trace.start_time
        trace.final_success = success
        del self._traces[session_id]

        logger.info(
            f"Trace session {session_id} complete: {trace.total_duration_ms:.0f}ms, "
            f"{len(trace.iterations)} iteration(s), "
            f"{trace.total_tool_calls} tool call(s) ({trace.failed_tool_calls} failed)"
        )
        return trace

    @property
    def active_sessions(self) -> int:
        return len(self._traces)

    @staticmethod
    def export_trace(trace: AgentTrace) -> str:
        """Render a trace as indented JSON."""
        return trace.model_dump_json(indent=2)

    @staticmethod
    def execution_stats(trace: AgentTrace) -> Dict[str, ToolStats]:
        """Group spans by tool name with call counts and total durations."""
        stats: Dict[str, ToolStats] = {}
        for iteration in trace.iterations:
            for span in iteration.tool_spans:
                entry = stats.setdefault(span.tool_name, ToolStats())
                entry.count += 1
                entry.total_ms += span.duration_ms or 0.0
        return stats

    @classmethod
    def get_execution_summary(cls, trace: AgentTrace) -> str:
        """Human-readable rollup of a finished trace."""
        lines = [
            f"Agent Session Summary ({trace.session_id}):",
            f"  Total Duration: {trace.total_duration_ms or 0:.0f}ms",
            f"  Iterations: {len(trace.iterations)}",
            "  Tool Breakdown:",
        ]
        for tool, stats in cls.execution_stats(trace).items():
            lines.append(f"    - {tool}: {stats.count}x (avg {stats.average_ms:.0f}ms)")
        return "\n".join(lines)
