"""Protocol for the completion endpoint the agent loop talks to."""

from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Protocol, Sequence

from ..config import ModelConfig
from ..messages import Conversation
from ..streaming import CompletionChunk


class CompletionTransport(Protocol):
    """
    Streams one completion for a conversation and a set of declared tools.
    """

    def stream_completion(
        self,
        conversation: Conversation,
        tool_definitions: Sequence[Dict[str, Any]],
        model_config: ModelConfig,
    ) -> AsyncIterator[CompletionChunk]:
        """Return a lazy, finite, non-restartable stream of completion chunks."""
        ...
