"""Visual plan models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from reelforge.common.models.base import WIRE_MODEL_CONFIG


class SceneType(str, Enum):
    """How a scene is visualised."""

    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


class VisualPlanItem(BaseModel):
    """One scene of the visual plan."""

    model_config = WIRE_MODEL_CONFIG

    type: SceneType
    description: str
    image_prompt: str | None = Field(default=None, alias="imagePrompt")
    video_start_time: float | None = Field(default=None, alias="videoStartTime")
    video_end_time: float | None = Field(default=None, alias="videoEndTime")

    @property
    def prompt_text(self) -> str:
        """Prompt for image generation, falling back to the description."""
        return self.image_prompt or self.description

    def as_image(self) -> "VisualPlanItem":
        """Return an IMAGE copy of this scene without video timestamps."""
        return self.model_copy(
            update={
                "type": SceneType.IMAGE,
                "image_prompt": self.prompt_text,
                "video_start_time": None,
                "video_end_time": None,
            }
        )


class PlanSource(str, Enum):
    """Where a visual plan came from."""

    MODEL = "model"
    FALLBACK = "fallback"


class PlanResult(BaseModel):
    """A visual plan together with the path that produced it."""

    model_config = ConfigDict(frozen=True)

    items: list[VisualPlanItem]
    source: PlanSource = PlanSource.MODEL
    error: str | None = None

    @property
    def used_fallback(self) -> bool:
        return self.source == PlanSource.FALLBACK

    def __len__(self) -> int:
        return len(self.items)


FALLBACK_PLAN: tuple[VisualPlanItem, ...] = (
    VisualPlanItem(
        type=SceneType.IMAGE,
        description="Intro",
        image_prompt="Futuristic app dashboard glowing 3d render, purple and blue neon",
    ),
    VisualPlanItem(
        type=SceneType.IMAGE,
        description="Feature Highlight",
        image_prompt="Abstract code visualization high tech blue and purple",
    ),
    VisualPlanItem(
        type=SceneType.IMAGE,
        description="User Benefit",
        image_prompt="Happy user holding phone modern style, photorealistic",
    ),
    VisualPlanItem(
        type=SceneType.IMAGE,
        description="Call to Action",
        image_prompt="Sleek product logo minimalist background, cinematic lighting",
    ),
)


def fallback_plan(error: str | None = None) -> PlanResult:
    """The fixed four-scene plan used when planning fails."""
    return PlanResult(items=list(FALLBACK_PLAN), source=PlanSource.FALLBACK, error=error)
