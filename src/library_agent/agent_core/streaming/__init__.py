"""Streaming response assembly."""

from .assembler import StreamAssembler
from .models import AssembledTurn, CancelToken, CompletionChunk, ToolCallFragment
from .sse import chunk_from_payload, iter_sse_chunks, parse_sse_line, parse_sse_lines

__all__ = [
    "StreamAssembler",
    "AssembledTurn",
    "CancelToken",
    "CompletionChunk",
    "ToolCallFragment",
    "chunk_from_payload",
    "iter_sse_chunks",
    "parse_sse_line",
    "parse_sse_lines",
]
