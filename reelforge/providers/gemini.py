"""Gemini provider backed by the google-genai SDK."""

from __future__ import annotations

import base64
from typing import Any

from google import genai
from google.genai import types

from reelforge.common.logging import get_logger
from reelforge.providers.base import (
    ContentPart,
    GenerationConfig,
    InlineData,
    ModelProvider,
    ModelResponse,
    ResponsePart,
)

logger = get_logger(__name__)


class GeminiProvider(ModelProvider):
    """Async Gemini client for text, structured JSON, speech and images."""

    def __init__(self, api_key: str = "", client: genai.Client | None = None):
        if client is None:
            if not api_key:
                raise ValueError("GEMINI_API_KEY is required for the Gemini provider")
            client = genai.Client(api_key=api_key)
        self._client = client

    @property
    def name(self) -> str:
        return "gemini"

    async def generate(
        self,
        model: str,
        contents: str | list[ContentPart],
        config: GenerationConfig | None = None,
    ) -> ModelResponse:
        logger.debug(
            "gemini_request",
            model=model,
            parts=1 if isinstance(contents, str) else len(contents),
        )
        response = await self._client.aio.models.generate_content(
            model=model,
            contents=self._build_contents(contents),
            config=self._build_config(config),
        )
        return self._normalise(response)

    @staticmethod
    def _build_contents(contents: str | list[ContentPart]) -> Any:
        if isinstance(contents, str):
            return contents
        parts = []
        for part in contents:
            if isinstance(part, InlineData):
                parts.append(types.Part.from_bytes(data=part.data, mime_type=part.mime_type))
            else:
                parts.append(types.Part.from_text(text=part))
        return types.Content(role="user", parts=parts)

    @staticmethod
    def _build_config(config: GenerationConfig | None) -> types.GenerateContentConfig | None:
        if config is None:
            return None

        kwargs: dict[str, Any] = {}
        if config.response_mime_type:
            kwargs["response_mime_type"] = config.response_mime_type
        if config.response_schema is not None:
            kwargs["response_schema"] = config.response_schema
        if config.max_output_tokens:
            kwargs["max_output_tokens"] = config.max_output_tokens
        if config.response_modalities:
            kwargs["response_modalities"] = list(config.response_modalities)
        if config.voice_name:
            kwargs["speech_config"] = types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=config.voice_name,
                    )
                )
            )
        if config.aspect_ratio:
            kwargs["image_config"] = types.ImageConfig(aspect_ratio=config.aspect_ratio)

        return types.GenerateContentConfig(**kwargs)

    @staticmethod
    def _normalise(response: Any) -> ModelResponse:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return ModelResponse()

        content = getattr(candidates[0], "content", None)
        raw_parts = getattr(content, "parts", None) or []

        parts: list[ResponsePart] = []
        for part in raw_parts:
            inline = getattr(part, "inline_data", None)
            if inline is not None and getattr(inline, "data", None):
                data = inline.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                parts.append(
                    ResponsePart(
                        inline_data=InlineData(
                            mime_type=getattr(inline, "mime_type", None) or "",
                            data=data,
                        )
                    )
                )
            elif getattr(part, "text", None):
                parts.append(ResponsePart(text=part.text))

        return ModelResponse(parts=parts)
