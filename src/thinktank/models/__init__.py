"""
Pydantic data models for the thinktank model processor.

Includes:
- LLM models (GenerationParameters, ProviderResult, SafetyInfo)
"""

from thinktank.models.llm_models import (
    GenerationParameters,
    ProviderResult,
    SafetyInfo,
)

__all__ = [
    "GenerationParameters",
    "ProviderResult",
    "SafetyInfo",
]
