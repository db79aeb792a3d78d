"""Generative-model providers."""

from reelforge.providers.base import (
    ContentPart,
    GenerationConfig,
    InlineData,
    ModelProvider,
    ModelResponse,
    ResponsePart,
)

__all__ = [
    "ContentPart",
    "GenerationConfig",
    "InlineData",
    "ModelProvider",
    "ModelResponse",
    "ResponsePart",
]
