"""
LLM-specific data models for the request/response cycle.

These models are the provider-neutral currency between the retry processor
and concrete provider clients (OpenRouter, ...). They abstract away the
provider's wire format.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerationParameters(BaseModel):
    """
    Sampling parameters passed to every generation call.

    Unset values are omitted from the provider payload so the provider
    default applies.
    """
    model_config = ConfigDict(frozen=True)

    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="Maximum tokens to generate")
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Nucleus sampling parameter")
    seed: Optional[int] = Field(default=None, description="Random seed for reproducibility")
    stop_sequences: Optional[list[str]] = Field(default=None, description="Stop sequences for generation")

    def to_payload(self) -> Dict[str, Any]:
        """Provider payload fragment (OpenAI-compatible names), without unset values."""
        payload = self.model_dump(exclude_none=True)
        if "stop_sequences" in payload:
            payload["stop"] = payload.pop("stop_sequences")
        return payload


class SafetyInfo(BaseModel):
    """Provider safety rating attached to a generation result."""
    model_config = ConfigDict(frozen=True)

    category: str = Field(..., description="Safety category reported by the provider")
    blocked: bool = Field(default=False, description="Whether this rating blocked the output")


class ProviderResult(BaseModel):
    """
    Raw result of one generation call.

    Contains the generated text plus metadata for audit/logging. Turning it
    into review text happens in APIService.process_llm_response.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(default="", description="Generated text")
    model: str = Field(default="", description="Model identifier reported by the provider")
    finish_reason: str = Field(default="", description="Why generation stopped: 'stop', 'length', 'content_filter', ...")
    prompt_tokens: Optional[int] = Field(default=None, ge=0, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, ge=0, description="Tokens in completion")
    latency_ms: int = Field(default=0, ge=0, description="Generation latency in milliseconds")
    safety_info: list[SafetyInfo] = Field(default_factory=list, description="Safety ratings, if reported")
    raw_metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific metadata (for debugging)"
    )

    @property
    def total_tokens(self) -> Optional[int]:
        if self.prompt_tokens is None or self.completion_tokens is None:
            return None
        return self.prompt_tokens + self.completion_tokens

    @property
    def blocked_by_safety(self) -> bool:
        return any(info.blocked for info in self.safety_info)
