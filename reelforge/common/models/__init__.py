"""Data models for reelforge."""

from reelforge.common.models.base import generate_id
from reelforge.common.models.project import (
    ProjectFile,
    Platform,
    VoiceOption,
    VideoFrame,
)
from reelforge.common.models.plan import (
    SceneType,
    VisualPlanItem,
    PlanSource,
    PlanResult,
    FALLBACK_PLAN,
    fallback_plan,
)
from reelforge.common.models.asset import (
    ImageAsset,
    VideoAsset,
    VisualAsset,
)

__all__ = [
    "generate_id",
    # Project
    "ProjectFile",
    "Platform",
    "VoiceOption",
    "VideoFrame",
    # Plan
    "SceneType",
    "VisualPlanItem",
    "PlanSource",
    "PlanResult",
    "FALLBACK_PLAN",
    "fallback_plan",
    # Assets
    "ImageAsset",
    "VideoAsset",
    "VisualAsset",
]
