"""Decode OpenAI-style server-sent-event payloads into completion chunks."""

from __future__ import annotations

import json
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, List, Optional

from .models import CompletionChunk, ToolCallFragment
from ..logger import get_logger

logger = get_logger(__name__)

DONE_MARKER = "[DONE]"


def chunk_from_payload(payload: Dict[str, Any]) -> Optional[CompletionChunk]:
    """Convert one ``chat.completion.chunk`` object into a ``CompletionChunk``.

    Returns None for payloads that carry nothing to assemble (usage-only or
    role-only chunks, malformed choices). Tool call entries that are not
    objects are skipped.
    """
    choices = payload.get("choices") or []
    if not isinstance(choices, list) or not choices:
        return None
    choice = choices[0] or {}
    if not isinstance(choice, dict):
        logger.debug(f"Skipping stream payload with a malformed choice: {choice!r:.120}")
        return None
    delta = choice.get("delta") or {}
    if not isinstance(delta, dict):
        logger.debug(f"Skipping stream payload with a malformed delta: {delta!r:.120}")
        return None

    raw_calls = delta.get("tool_calls") or []
    if not isinstance(raw_calls, list):
        raw_calls = []

    fragments = []
    for raw in raw_calls:
        function = raw.get("function") if isinstance(raw, dict) else None
        if function is None:
            function = {}
        if not isinstance(raw, dict) or not isinstance(function, dict):
            logger.debug(f"Skipping malformed tool call delta: {raw!r:.120}")
            continue
        index = raw.get("index")
        fragments.append(
            ToolCallFragment(
                index=index if isinstance(index, int) else 0,
                id_delta=_text(raw.get("id")),
                name_delta=_text(function.get("name")),
                arguments_delta=_text(function.get("arguments")),
            )
        )

    chunk = CompletionChunk(
        content=_text(delta.get("content")),
        tool_calls=fragments,
        finish_reason=_text(choice.get("finish_reason")),
    )
    if chunk.content is None and not chunk.tool_calls and chunk.finish_reason is None:
        return None
    return chunk


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _data_field(line: str) -> Optional[str]:
    line = line.strip()
    if not line.startswith("data:"):
        return None
    return line[len("data:") :].strip()


def parse_sse_line(line: str) -> Optional[CompletionChunk]:
    """Decode a single ``data: {...}`` line. Malformed or non-data lines yield None."""
    data = _data_field(line)
    if not data or data == DONE_MARKER:
        return None
    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        logger.debug(f"Skipping malformed stream line: {data[:120]}")
        return None
    if not isinstance(payload, dict):
        return None
    return chunk_from_payload(payload)


async def iter_sse_chunks(lines: AsyncIterable[str]) -> AsyncIterator[CompletionChunk]:
    """Turn an async stream of SSE lines into chunks, ending at the ``[DONE]`` marker."""
    async for line in lines:
        if _data_field(line) == DONE_MARKER:
            return
        chunk = parse_sse_line(line)
        if chunk is not None:
            yield chunk


def parse_sse_lines(lines: Iterable[str]) -> List[CompletionChunk]:
    """Decode a buffered sequence of SSE lines, stopping at ``[DONE]``."""
    chunks = []
    for line in lines:
        if _data_field(line) == DONE_MARKER:
            break
        chunk = parse_sse_line(line)
        if chunk is not None:
            chunks.append(chunk)
    return chunks
