"""Image generation backends.

Two tiers are used by the AssetGenerator:

- ``FluxSpaceBackend``: the community FLUX.1-schnell space on Hugging Face,
  called through ``gradio_client`` with retry and exponential backoff.
- ``GeminiImageBackend``: the Gemini image model, a single attempt used as
  the fallback tier.

Backends return ``None`` when they produce nothing usable; they do not
raise for provider failures.
"""

from __future__ import annotations

import asyncio
import io
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
from gradio_client import Client as GradioClient
from PIL import Image

from reelforge.common.config import Settings
from reelforge.common.logging import ProgressLevel, ProgressReporter, get_logger
from reelforge.common.models import Platform
from reelforge.common.retry import RetryExhaustedError, RetryPolicy, exponential_backoff
from reelforge.providers import GenerationConfig, ModelProvider

logger = get_logger(__name__)

QUALITY_SUFFIX = (
    ", photorealistic, 8k, highly detailed, cinematic lighting, "
    "award winning photography, sharp focus, high fidelity"
)
MAX_SEED = 2**31 - 1


@dataclass(frozen=True)
class GeneratedImage:
    """Raw image bytes returned by a backend."""

    data: bytes
    mime_type: str = "image/png"


class ImageGeneratorBackend(ABC):
    """Abstract base class for image generation backends."""

    @abstractmethod
    async def generate(self, prompt: str, platform: Platform) -> GeneratedImage | None:
        """Generate an image for ``prompt`` sized for ``platform``.

        Returns:
            The image, or None if this backend produced nothing usable
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name for logging."""
        pass


def sniff_image(data: bytes | None) -> GeneratedImage | None:
    """Validate that ``data`` is a decodable image and detect its mime type."""
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (OSError, SyntaxError, ValueError) as e:
        logger.warning("image_payload_invalid", size=len(data), error=str(e))
        return None
    mime_type = Image.MIME.get(image_format or "", "image/png")
    return GeneratedImage(data=data, mime_type=mime_type)


def first_result_descriptor(result: Any) -> str | None:
    """Extract a URL or file path from a Gradio prediction result."""
    item = result
    if isinstance(result, (list, tuple)):
        item = result[0] if result else None

    if isinstance(item, str):
        return item or None
    if isinstance(item, dict):
        return item.get("url") or item.get("path") or None
    return None


def connect_gradio_space(space: str, hf_token: str | None = None) -> GradioClient:
    """Connect to a Gradio space (blocking)."""
    if hf_token:
        return GradioClient(space, hf_token=hf_token, verbose=False)
    return GradioClient(space, verbose=False)


# =============================================================================
# Primary: FLUX.1-schnell space
# =============================================================================


class FluxSpaceBackend(ImageGeneratorBackend):
    """Community-hosted FLUX.1-schnell inference through gradio_client."""

    def __init__(
        self,
        settings: Settings,
        progress: ProgressReporter | None = None,
        client_factory: Callable[[str, str | None], Any] = connect_gradio_space,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.space = settings.flux_space
        self.api_name = settings.flux_api_name
        self.steps = settings.flux_steps
        self.hf_token = settings.hf_token
        self.download_timeout = settings.download_timeout_seconds
        self.progress = progress or ProgressReporter()
        self._client_factory = client_factory
        self._http_client = http_client
        self._rng = rng or random.Random()
        self.retry_policy: RetryPolicy[GeneratedImage] = RetryPolicy(
            max_attempts=settings.flux_max_attempts,
            backoff=exponential_backoff(
                settings.flux_initial_delay_seconds, settings.flux_backoff_base
            ),
            delay_after_final_attempt=False,
            sleep=sleep,
            name="flux",
        )

    @property
    def name(self) -> str:
        return "flux"

    async def generate(self, prompt: str, platform: Platform) -> GeneratedImage | None:
        width, height = platform.image_size
        enhanced_prompt = f"{prompt}{QUALITY_SUFFIX}"
        max_attempts = self.retry_policy.max_attempts

        async def attempt_generation(attempt: int) -> GeneratedImage | None:
            if attempt == 1:
                self.progress.emit("Connecting to HF Space (Flux.1)...", ProgressLevel.CONNECT)
            else:
                self.progress.emit(
                    f"Retrying HF Space (Attempt {attempt}/{max_attempts})...",
                    ProgressLevel.CONNECT,
                )

            client = await asyncio.to_thread(self._client_factory, self.space, self.hf_token)
            result = await asyncio.to_thread(
                client.predict,
                enhanced_prompt,
                self._rng.randint(0, MAX_SEED),
                True,
                width,
                height,
                self.steps,
                api_name=self.api_name,
            )
            self.progress.emit("Received response from Hugging Face.", ProgressLevel.INFO)

            source = first_result_descriptor(result)
            if source is None:
                logger.warning("flux_empty_result", attempt=attempt)
                return None

            self.progress.emit("Downloading Flux asset...", ProgressLevel.INFO)
            return sniff_image(await self._fetch(source))

        try:
            image = await self.retry_policy.run(attempt_generation)
        except RetryExhaustedError as e:
            self.progress.emit(
                f"Flux failed: {e.last_error or 'no image returned'}",
                ProgressLevel.WARNING,
                attempts=e.attempts,
            )
            return None

        self.progress.emit("Flux Image generated.", ProgressLevel.SUCCESS)
        return image

    async def _fetch(self, source: str) -> bytes | None:
        """Download a remote result or read a file gradio_client cached locally."""
        if source.startswith(("http://", "https://")):
            if self._http_client is not None:
                response = await self._http_client.get(source)
            else:
                async with httpx.AsyncClient(
                    timeout=self.download_timeout, follow_redirects=True
                ) as client:
                    response = await client.get(source)
            response.raise_for_status()
            return response.content

        path = Path(source)
        if not path.is_file():
            logger.warning("flux_result_missing", path=source)
            return None
        return await asyncio.to_thread(path.read_bytes)


# =============================================================================
# Fallback: Gemini image model
# =============================================================================


class GeminiImageBackend(ImageGeneratorBackend):
    """Single-shot image generation with the Gemini image model."""

    def __init__(
        self,
        provider: ModelProvider,
        settings: Settings,
        progress: ProgressReporter | None = None,
    ):
        self.provider = provider
        self.model = settings.image_model
        self.progress = progress or ProgressReporter()

    @property
    def name(self) -> str:
        return "gemini_image"

    async def generate(self, prompt: str, platform: Platform) -> GeneratedImage | None:
        self.progress.emit("Attempting fallback with Gemini Image Model...", ProgressLevel.INFO)
        config = GenerationConfig(aspect_ratio=platform.aspect_ratio)

        try:
            response = await self.provider.generate(self.model, [prompt], config)
        except Exception as e:
            self.progress.emit(
                f"Gemini Image Gen failed: {e}",
                ProgressLevel.ERROR,
                error_type=type(e).__name__,
            )
            return None

        # The image may follow a text part, so every part is scanned
        inline = response.first_inline()
        if inline is None:
            self.progress.emit("No image data found in Gemini response.", ProgressLevel.WARNING)
            return None

        self.progress.emit("Gemini Image generated successfully.", ProgressLevel.SUCCESS)
        return GeneratedImage(data=inline.data, mime_type=inline.mime_type or "image/png")
