"""Configuration models and environment settings."""

from .models import AgentConfig, LibraryScope, ModelConfig, RateLimitKind, RateLimitPolicy
from .settings import AgentSettings, get_settings

__all__ = [
    "AgentConfig",
    "LibraryScope",
    "ModelConfig",
    "RateLimitKind",
    "RateLimitPolicy",
    "AgentSettings",
    "get_settings",
]
