"""Environment-driven defaults for the agent."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import AgentConfig, ModelConfig, RateLimitKind, RateLimitPolicy


class AgentSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LIBRARY_AGENT_", env_file=".env", extra="ignore")

    api_url: str = "https://api.openai.com/v1"
    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("OPENAI_API_KEY", "LIBRARY_AGENT_API_KEY"),
    )
    model: str = "gpt-4o-mini"
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    rate_limit_kind: Optional[RateLimitKind] = None
    rate_limit_value: float = 5

    max_agent_iterations: int = 15
    max_tool_retries: int = 2
    max_search_results: int = 20
    max_content_length: int = 50000
    require_approval_for_destructive: bool = False
    approval_without_handler: Literal["allow", "deny"] = "allow"

    def build_model_config(self) -> ModelConfig:
        rate_limit = None
        if self.rate_limit_kind is not None:
            rate_limit = RateLimitPolicy(kind=self.rate_limit_kind, limit=self.rate_limit_value)
        return ModelConfig(
            id="env",
            name="env",
            api_url=self.api_url,
            api_key=self.api_key,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            rate_limit=rate_limit,
        )

    def build_agent_config(self) -> AgentConfig:
        return AgentConfig(
            max_agent_iterations=self.max_agent_iterations,
            max_tool_retries=self.max_tool_retries,
            max_search_results=self.max_search_results,
            max_content_length=self.max_content_length,
            require_approval_for_destructive=self.require_approval_for_destructive,
            approval_without_handler=self.approval_without_handler,
        )


@lru_cache(maxsize=1)
def get_settings() -> AgentSettings:
    return AgentSettings()
