"""Conversions between the provider-agnostic conversation and the OpenAI chat wire format."""

from typing import Any, Dict, List, Sequence, cast

from openai.types.chat import ChatCompletionToolParam

from library_agent.agent_core.config import ModelConfig
from library_agent.agent_core.messages import (
    AssistantMessage,
    BaseMessage,
    SystemMessage,
    ToolMessage,
    UserMessage,
)

_REASONING_PREFIXES = ("o1", "o3", "o4", "gpt-5")
_REASONING_MARKERS = ("reasoner", "r1")


def is_reasoning_model(model: str) -> bool:
    """Reasoning models reject ``temperature`` and take ``max_completion_tokens``."""
    name = model.lower()
    if name.startswith(_REASONING_PREFIXES):
        return True
    if any(f"/{prefix}" in name for prefix in _REASONING_PREFIXES):
        return True
    return any(marker in name for marker in _REASONING_MARKERS)


def convert_history(history: Sequence[BaseMessage]) -> List[Dict[str, Any]]:
    """
    Converts generic BaseMessage history to OpenAI specific dictionary history.

    Args:
        history: List of BaseMessage objects.

    Returns:
        List of OpenAI message dictionaries.
    """
    openai_history: List[Dict[str, Any]] = []
    for msg in history:
        if isinstance(msg, UserMessage):
            openai_history.append({"role": "user", "content": msg.content})
        elif isinstance(msg, AssistantMessage):
            openai_msg: Dict[str, Any] = {"role": "assistant", "content": msg.content or None}
            if msg.tool_calls:
                openai_msg["tool_calls"] = msg.tool_calls
            openai_history.append(openai_msg)
        elif isinstance(msg, SystemMessage):
            openai_history.append({"role": "system", "content": msg.content})
        elif isinstance(msg, ToolMessage):
            openai_history.append(
                {"role": "tool", "content": msg.content, "tool_call_id": msg.tool_call_id, "name": msg.name}
            )
    return openai_history


def build_request_params(
    messages: List[Dict[str, Any]],
    tool_definitions: Sequence[Dict[str, Any]],
    model_config: ModelConfig,
) -> Dict[str, Any]:
    """Assemble the keyword arguments of a streaming ``chat.completions.create`` call."""
    params: Dict[str, Any] = {
        "model": model_config.model,
        "messages": messages,
        "stream": True,
    }

    if tool_definitions:
        tools = cast(List[ChatCompletionToolParam], list(tool_definitions))
        params["tools"] = tools
        params["tool_choice"] = "auto"

    if is_reasoning_model(model_config.model):
        if model_config.max_tokens is not None:
            params["max_completion_tokens"] = model_config.max_tokens
        if model_config.reasoning_effort is not None:
            params["reasoning_effort"] = model_config.reasoning_effort
    else:
        if model_config.temperature is not None:
            params["temperature"] = model_config.temperature
        if model_config.max_tokens is not None:
            params["max_tokens"] = model_config.max_tokens

    return params
