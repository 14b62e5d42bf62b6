"""Streaming completion transport for OpenAI-compatible endpoints."""

from typing import Any, AsyncIterator, Dict, Optional, Sequence

import openai
from openai import AsyncOpenAI

from library_agent.agent_core.config import ModelConfig
from library_agent.agent_core.exceptions import CompletionTransportError
from library_agent.agent_core.logger import get_logger
from library_agent.agent_core.messages import Conversation
from library_agent.agent_core.streaming import CompletionChunk, chunk_from_payload
from .adapter import build_request_params, convert_history

logger = get_logger(__name__)


class OpenAICompletionTransport:
    """
    Streams chat completions from any OpenAI-compatible endpoint.

    A client is created lazily per model configuration unless one is injected,
    so a single transport can serve several configurations.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, timeout: float = 120.0) -> None:
        """
        Args:
            client: Optional preconfigured client used for every request.
            timeout: Request timeout in seconds for lazily created clients.
        """
        self._client = client
        self._timeout = timeout
        self._clients: Dict[str, AsyncOpenAI] = {}

    def _client_for(self, model_config: ModelConfig) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        client = self._clients.get(model_config.id)
        if client is None:
            client = AsyncOpenAI(
                api_key=model_config.api_key or None,
                base_url=model_config.api_url,
                timeout=self._timeout,
            )
            self._clients[model_config.id] = client
        return client

    async def stream_completion(
        self,
        conversation: Conversation,
        tool_definitions: Sequence[Dict[str, Any]],
        model_config: ModelConfig,
    ) -> AsyncIterator[CompletionChunk]:
        """Yield chunks for one completion; transport failures become ``CompletionTransportError``."""
        client = self._client_for(model_config)
        params = build_request_params(convert_history(conversation.messages), tool_definitions, model_config)
        logger.debug(
            f"Requesting streamed completion from '{model_config.name}' ({model_config.model}), "
            f"{len(params['messages'])} message(s), {len(tool_definitions)} tool(s)."
        )

        try:
            stream = await client.chat.completions.create(**params)
        except openai.APITimeoutError as exc:
            raise TimeoutError(str(exc)) from exc
        except openai.APIError as exc:
            raise CompletionTransportError(f"Completion request failed: {exc}") from exc

        try:
            async for raw_chunk in stream:
                chunk = chunk_from_payload(raw_chunk.model_dump(exclude_none=True))
                if chunk is not None:
                    yield chunk
        except openai.APITimeoutError as exc:
            raise TimeoutError(str(exc)) from exc
        except openai.APIError as exc:
            raise CompletionTransportError(f"Completion stream failed: {exc}") from exc
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                await close()
