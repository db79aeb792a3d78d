"""Per-scene asset generator with a two-tier image strategy.

VIDEO scenes are passed through as clip references; IMAGE scenes go to
the primary backend first and to the fallback backend if the primary
produces nothing. A scene where both tiers fail yields ``None`` and the
run carries on.
"""

from __future__ import annotations

import base64

from reelforge.common.logging import ProgressLevel, ProgressReporter, get_logger
from reelforge.common.models import (
    ImageAsset,
    Platform,
    SceneType,
    VideoAsset,
    VisualAsset,
    VisualPlanItem,
)
from reelforge.generation.image_backends import GeneratedImage, ImageGeneratorBackend

logger = get_logger(__name__)

DEFAULT_VIDEO_START = 0.0
DEFAULT_VIDEO_END = 5.0


class AssetGenerator:
    """Turns plan items into visual assets.

    - VIDEO items never call a backend; clip extraction happens elsewhere
    - IMAGE items try ``primary`` then ``fallback``
    - Items are processed one at a time, in plan order
    """

    def __init__(
        self,
        primary: ImageGeneratorBackend,
        fallback: ImageGeneratorBackend | None = None,
        progress: ProgressReporter | None = None,
        video_url: str | None = None,
    ):
        self.primary = primary
        self.fallback = fallback
        self.progress = progress or ProgressReporter()
        self.video_url = video_url

        # Tracking
        self.primary_count = 0
        self.fallback_count = 0
        self.video_count = 0
        self.failed_count = 0

    async def generate(
        self,
        plan_item: VisualPlanItem,
        platform: Platform,
    ) -> VisualAsset | None:
        """Produce the asset for one scene, or None if every strategy failed."""
        if plan_item.type == SceneType.VIDEO:
            self.video_count += 1
            start = plan_item.video_start_time
            end = plan_item.video_end_time
            return VideoAsset(
                description=plan_item.description,
                video_start=start if start is not None else DEFAULT_VIDEO_START,
                video_end=end if end is not None else DEFAULT_VIDEO_END,
                video_url=self.video_url,
            )

        prompt = plan_item.prompt_text

        image = await self.primary.generate(prompt, platform)
        if image is not None:
            self.primary_count += 1
            return self._image_asset(image, plan_item, prompt, self.primary.name)

        if self.fallback is not None:
            self.progress.emit("Switching to Gemini Fallback...", ProgressLevel.CONNECT)
            image = await self.fallback.generate(prompt, platform)
            if image is not None:
                self.fallback_count += 1
                return self._image_asset(image, plan_item, prompt, self.fallback.name)

        self.failed_count += 1
        self.progress.emit(
            "All image generation strategies failed.",
            ProgressLevel.ERROR,
            description=plan_item.description,
        )
        return None

    async def generate_all(
        self,
        plan: list[VisualPlanItem],
        platform: Platform,
    ) -> list[VisualAsset | None]:
        """Generate assets sequentially; the result is aligned with ``plan``."""
        logger.info(
            "generating_assets",
            total=len(plan),
            image_count=sum(1 for item in plan if item.type == SceneType.IMAGE),
            platform=platform.value,
        )

        assets: list[VisualAsset | None] = []
        for index, item in enumerate(plan, start=1):
            self.progress.emit(
                f"Generating visual {index}/{len(plan)}: {item.description}",
                ProgressLevel.INFO,
            )
            assets.append(await self.generate(item, platform))
        return assets

    def get_generation_report(self) -> dict:
        """Get report on generation statistics."""
        return {
            "primary_count": self.primary_count,
            "fallback_count": self.fallback_count,
            "video_count": self.video_count,
            "failed_count": self.failed_count,
            "primary_backend": self.primary.name,
            "fallback_backend": self.fallback.name if self.fallback else None,
        }

    def reset_tracking(self) -> None:
        """Reset generation counters."""
        self.primary_count = 0
        self.fallback_count = 0
        self.video_count = 0
        self.failed_count = 0

    @staticmethod
    def _image_asset(
        image: GeneratedImage,
        plan_item: VisualPlanItem,
        prompt: str,
        provider: str,
    ) -> ImageAsset:
        return ImageAsset(
            base64=base64.b64encode(image.data).decode("ascii"),
            prompt=prompt,
            description=plan_item.description,
            mime_type=image.mime_type,
            provider=provider,
        )
