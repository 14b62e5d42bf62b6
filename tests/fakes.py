"""Scripted completion streams for driving the agent loop without a network."""

from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from library_agent.agent_core.config import ModelConfig
from library_agent.agent_core.messages import Conversation
from library_agent.agent_core.streaming import CompletionChunk, ToolCallFragment


def text_chunks(*parts: str) -> List[CompletionChunk]:
    return [CompletionChunk(content=part) for part in parts]


def tool_call_chunks(index: int, call_id: str, name: str, *argument_parts: str) -> List[CompletionChunk]:
    """Stream one tool call the way OpenAI does: id and name first, then argument pieces."""
    chunks = [CompletionChunk(tool_calls=[ToolCallFragment(index=index, id_delta=call_id, name_delta=name)])]
    for part in argument_parts:
        chunks.append(CompletionChunk(tool_calls=[ToolCallFragment(index=index, arguments_delta=part)]))
    return chunks


class ChunkStream:
    """Async iterator over prepared chunks that can fail part-way and records closing."""

    def __init__(self, chunks: Sequence[CompletionChunk], error: Optional[BaseException] = None) -> None:
        self._chunks = list(chunks)
        self._error = error
        self.closed = False

    def __aiter__(self) -> "ChunkStream":
        return self

    async def __anext__(self) -> CompletionChunk:
        if self._chunks:
            return self._chunks.pop(0)
        if self._error is not None:
            error, self._error = self._error, None
            raise error
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.closed = True


class ScriptedTransport:
    """A completion transport replaying one scripted turn per call."""

    def __init__(self, turns: Sequence[Any]) -> None:
        self.turns = list(turns)
        self.requests: List[Dict[str, Any]] = []
        self.streams: List[ChunkStream] = []

    def stream_completion(
        self, conversation: Conversation, tool_definitions: Sequence[Dict[str, Any]], model_config: ModelConfig
    ) -> AsyncIterator[CompletionChunk]:
        self.requests.append(
            {
                "messages": [message.model_dump() for message in conversation.messages],
                "tools": [definition["function"]["name"] for definition in tool_definitions],
                "model_config_id": model_config.id,
            }
        )
        turn = self.turns.pop(0)
        stream = turn if isinstance(turn, ChunkStream) else ChunkStream(turn)
        self.streams.append(stream)
        return stream
