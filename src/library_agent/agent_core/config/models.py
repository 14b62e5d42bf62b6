"""Configuration models for model endpoints, rate limits and agent bounds."""

import uuid
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator


class RateLimitKind(str, Enum):
    """Admission policy applied to calls made under one model configuration."""

    CONCURRENCY = "concurrency"
    REQUESTS_PER_MINUTE = "rpm"
    TOKENS_PER_MINUTE = "tpm"


class RateLimitPolicy(BaseModel):
    """
    Rate limit attached to a model configuration.

    Attributes:
        kind: Which quantity is limited.
        limit: Maximum in-flight calls, requests per window or tokens per window.
        window_seconds: Length of the counting window for the per-minute kinds.
    """

    kind: RateLimitKind
    limit: float = Field(gt=0)
    window_seconds: float = Field(default=60.0, gt=0)


class ModelConfig(BaseModel):
    """
    A named completion endpoint configuration.

    Attributes:
        id: Stable identifier; rate limiter state is keyed by it.
        name: Display name.
        api_url: Base URL of the OpenAI-compatible endpoint.
        api_key: Bearer token for the endpoint.
        model: Model identifier sent with each request.
        temperature: Sampling temperature (ignored for reasoning models).
        max_tokens: Completion token cap.
        reasoning_effort: Optional effort hint for reasoning models.
        rate_limit: Optional admission policy.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str = "default"
    api_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    model: str = "gpt-4o-mini"
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    reasoning_effort: Optional[Literal["low", "medium", "high"]] = None
    rate_limit: Optional[RateLimitPolicy] = None


class LibraryScope(BaseModel):
    """Which part of the document library tools operate on."""

    type: Literal["user", "group", "collection", "all"] = "user"
    group_id: Optional[int] = None
    collection_id: Optional[int] = None

    @model_validator(mode="after")
    def _check_target(self) -> "LibraryScope":
        if self.type == "group" and self.group_id is None:
            raise ValueError("group scope requires group_id")
        if self.type == "collection" and self.collection_id is None:
            raise ValueError("collection scope requires collection_id")
        return self


class AgentConfig(BaseModel):
    """
    Shared configuration handed to every tool invocation and to the agent loop.

    ``approval_without_handler`` decides what happens to a destructive call
    that needs approval when no permission handler is configured: ``"allow"``
    executes it, ``"deny"`` folds back a denial.
    """

    library_scope: LibraryScope = Field(default_factory=LibraryScope)
    max_search_results: int = Field(default=20, ge=1)
    include_content: bool = True
    max_content_length: int = Field(default=50000, ge=0)
    max_agent_iterations: int = Field(default=15, ge=1)
    max_tool_retries: int = Field(default=2, ge=0)
    auto_ocr: bool = False
    require_approval_for_destructive: bool = False
    approval_without_handler: Literal["allow", "deny"] = "allow"
