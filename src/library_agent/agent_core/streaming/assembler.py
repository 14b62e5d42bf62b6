"""Reassemble text and tool calls from a token-streamed completion."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Dict, List, Optional

from .models import AssembledTurn, CancelToken, CompletionChunk, ToolCallFragment
from ..exceptions import AgentCancelledError, AgentError, CompletionTransportError
from ..logger import get_logger
from ..tools.models import ToolCallRequest

logger = get_logger(__name__)


@dataclass
class _PartialToolCall:
    id: str = ""
    name: str = ""
    arguments: str = ""


class StreamAssembler:
    """
    Accumulates one completion stream.

    Text deltas are forwarded to ``on_token`` as they arrive and kept for the
    final answer. Tool call fragments are grouped by index; names and
    arguments are concatenated in arrival order and the last non-empty id
    wins. Arguments stay unparsed until the stream ends.
    """

    def __init__(
        self,
        on_token: Optional[Callable[[str], None]] = None,
        on_tool_calls: Optional[Callable[[List[ToolCallRequest]], None]] = None,
        on_complete: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._on_token = on_token
        self._on_tool_calls = on_tool_calls
        self._on_complete = on_complete
        self._text_parts: List[str] = []
        self._in_progress: Dict[int, _PartialToolCall] = {}

    @property
    def text(self) -> str:
        return "".join(self._text_parts)

    def feed(self, chunk: CompletionChunk) -> None:
        """Apply one fragment."""
        if chunk.content:
            self._text_parts.append(chunk.content)
            if self._on_token:
                self._on_token(chunk.content)

        for fragment in chunk.tool_calls:
            self._apply_fragment(fragment)

    def _apply_fragment(self, fragment: ToolCallFragment) -> None:
        index = fragment.index if fragment.index is not None else 0
        partial = self._in_progress.setdefault(index, _PartialToolCall())
        if fragment.id_delta:
            partial.id = fragment.id_delta
        if fragment.name_delta:
            partial.name += fragment.name_delta
        if fragment.arguments_delta:
            partial.arguments += fragment.arguments_delta

    def finalize(self) -> AssembledTurn:
        """Close the turn and dispatch ``on_tool_calls`` or ``on_complete``."""
        requests = []
        for index in sorted(self._in_progress):
            partial = self._in_progress[index]
            if not partial.name:
                logger.warning(f"Discarding streamed tool call at index {index}: no function name was received.")
                continue
            requests.append(
                ToolCallRequest(
                    id=partial.id or f"call_{index}",
                    name=partial.name,
                    raw_arguments=partial.arguments or "{}",
                )
            )

        turn = AssembledTurn(text=self.text, tool_calls=requests)
        if requests:
            logger.debug(f"Stream completed with {len(requests)} tool call(s).")
            if self._on_tool_calls:
                self._on_tool_calls(requests)
        elif self._on_complete:
            self._on_complete(turn.text)
        return turn

    def _abort(self, reason: str) -> AgentCancelledError:
        partial = self.text
        if self._on_complete:
            self._on_complete(partial)
        return AgentCancelledError(reason, partial_text=partial)

    async def consume(
        self, stream: AsyncIterator[CompletionChunk], cancel: Optional[CancelToken] = None
    ) -> AssembledTurn:
        """
        Read ``stream`` to the end and return the assembled turn.

        Args:
            stream: Lazy, finite sequence of fragments from one completion call.
            cancel: Optional cancellation signal, checked between fragments.

        Returns:
            The assembled text and tool calls.

        Raises:
            AgentCancelledError: If cancelled or timed out; ``on_complete`` has
                already received the partial text.
            CompletionTransportError: If the transport failed mid-stream.
        """
        try:
            if cancel is not None and cancel.cancelled:
                raise self._abort(cancel.reason)
            async for chunk in stream:
                if cancel is not None and cancel.cancelled:
                    logger.info(f"Stream cancelled after {len(self.text)} characters.")
                    raise self._abort(cancel.reason)
                self.feed(chunk)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            logger.warning(f"Completion stream timed out after {len(self.text)} characters.")
            raise self._abort("Request timed out") from exc
        except AgentError:
            raise
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error(f"Completion stream failed: {exc}", exc_info=True)
            raise CompletionTransportError(str(exc)) from exc
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                try:
                    await aclose()
                except Exception as exc:
                    logger.debug(f"Ignoring error while closing completion stream: {exc}")

        return self.finalize()
