"""Provider port for generative-model calls.

Components depend on ``ModelProvider`` only; the concrete client is built once
by the entry point and injected, so tests can swap in a fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class InlineData:
    """Binary payload carried inline in a request or response."""

    mime_type: str
    data: bytes


ContentPart = Union[str, InlineData]


@dataclass(frozen=True)
class ResponsePart:
    """One part of a model response: text or inline binary data."""

    text: str | None = None
    inline_data: InlineData | None = None


@dataclass(frozen=True)
class ModelResponse:
    """Normalised model response."""

    parts: list[ResponsePart] = field(default_factory=list)

    @property
    def text(self) -> str | None:
        texts = [p.text for p in self.parts if p.text]
        return "".join(texts) if texts else None

    def first_inline(self, mime_prefix: str = "") -> InlineData | None:
        """First inline payload whose mime type starts with ``mime_prefix``."""
        for part in self.parts:
            inline = part.inline_data
            if inline and inline.data and inline.mime_type.startswith(mime_prefix):
                return inline
        return None


@dataclass(frozen=True)
class GenerationConfig:
    """Provider-neutral request options."""

    response_mime_type: str | None = None
    response_schema: dict[str, Any] | None = None
    max_output_tokens: int | None = None
    response_modalities: tuple[str, ...] = ()
    voice_name: str | None = None
    aspect_ratio: str | None = None


class ModelProvider(ABC):
    """Abstract base class for generative-model providers."""

    @abstractmethod
    async def generate(
        self,
        model: str,
        contents: str | list[ContentPart],
        config: GenerationConfig | None = None,
    ) -> ModelResponse:
        """Send one request and return the normalised response.

        Raises whatever the underlying transport raises; callers decide
        whether to retry, fall back or propagate.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging."""
        pass
