"""Data models for streamed completion fragments."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

from ..tools.models import ToolCallRequest


@dataclass(frozen=True)
class ToolCallFragment:
    """A partial tool call update, addressed by ``index`` rather than id."""

    index: int = 0
    id_delta: Optional[str] = None
    name_delta: Optional[str] = None
    arguments_delta: Optional[str] = None


@dataclass(frozen=True)
class CompletionChunk:
    """One decoded fragment of a streamed completion."""

    content: Optional[str] = None
    tool_calls: List[ToolCallFragment] = field(default_factory=list)
    finish_reason: Optional[str] = None


@dataclass
class AssembledTurn:
    """Everything one completion call produced once its stream has ended."""

    text: str = ""
    tool_calls: List[ToolCallRequest] = field(default_factory=list)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


class CancelToken:
    """Cooperative cancellation signal shared between a caller and a running session."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason = "Request was cancelled"

    def cancel(self, reason: Optional[str] = None) -> None:
        if reason:
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()
