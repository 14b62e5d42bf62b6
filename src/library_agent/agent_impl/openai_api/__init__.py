from .adapter import build_request_params, convert_history, is_reasoning_model
from .transport import OpenAICompletionTransport

__all__ = ["OpenAICompletionTransport", "build_request_params", "convert_history", "is_reasoning_model"]
