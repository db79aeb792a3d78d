"""Visual Planner Agent - breaks the script into IMAGE/VIDEO scenes.

The planner never raises. Request errors, malformed JSON and schema
violations all produce the fixed fallback plan, and the returned
PlanResult records which path was taken.
"""

from __future__ import annotations

import json
import math

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from reelforge.agents.base import AgentConfig, BaseAgent
from reelforge.common.config import Settings
from reelforge.common.logging import ProgressLevel, ProgressReporter, get_logger
from reelforge.common.models import (
    PlanResult,
    PlanSource,
    ProjectFile,
    SceneType,
    VideoFrame,
    VisualPlanItem,
    fallback_plan,
)
from reelforge.common.text import clean_json
from reelforge.providers import ContentPart, GenerationConfig, InlineData, ModelProvider

logger = get_logger(__name__)

FILE_EXCERPT_CHARS = 1_000
CODE_CONTEXT_CHARS = 5_000
DEFAULT_CLIP_SECONDS = 5.0

PLAN_RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "type": {"type": "STRING", "enum": ["IMAGE", "VIDEO"]},
            "description": {"type": "STRING"},
            "imagePrompt": {"type": "STRING"},
            "videoStartTime": {"type": "NUMBER"},
            "videoEndTime": {"type": "NUMBER"},
        },
        "required": ["type", "description"],
    },
}

_PLAN_ADAPTER = TypeAdapter(list[VisualPlanItem])


class PlanParseError(ValueError):
    """Model output could not be turned into a visual plan."""


# =============================================================================
# Input/Output Models
# =============================================================================


class VisualPlannerInput(BaseModel):
    """Input for the Visual Planner Agent."""

    script: str
    files: list[ProjectFile] = Field(default_factory=list)
    video_frames: list[VideoFrame] | None = None


class VisualPlannerOutput(BaseModel):
    """Output from the Visual Planner Agent."""

    result: PlanResult

    @property
    def items(self) -> list[VisualPlanItem]:
        return self.result.items


# =============================================================================
# Context helpers
# =============================================================================


def build_code_context(files: list[ProjectFile]) -> str:
    """Condensed code context: 1k chars per file, 5k chars overall."""
    joined = "\n\n".join(f"{f.name}:\n{f.content[:FILE_EXCERPT_CHARS]}" for f in files)
    return joined[:CODE_CONTEXT_CHARS]


def select_context_frames(frames: list[VideoFrame], max_frames: int = 5) -> list[VideoFrame]:
    """Pick at most ``max_frames`` frames by even stride across the sequence."""
    if not frames or max_frames < 1:
        return []
    step = math.ceil(len(frames) / max_frames)
    return frames[::step][:max_frames]


def build_frame_parts(frames: list[VideoFrame]) -> list[ContentPart]:
    """Inline JPEG parts, each followed by its timestamp label."""
    parts: list[ContentPart] = []
    for frame in frames:
        parts.append(InlineData(mime_type="image/jpeg", data=frame.data))
        parts.append(f"[Timestamp: {frame.timestamp}s]")
    return parts


def build_plan_prompt(script: str, code_context: str, has_frames: bool) -> str:
    frame_context = (
        "I have uploaded frames from a demo video of the app. "
        "Use 'VIDEO' type if a frame matches the script content."
        if has_frames
        else ""
    )
    return f"""
You are a video director.
Script: "{script}"

Source Code Context: {code_context}

{frame_context}

TASK:
Break the script into 4-6 visual scenes.
For each scene, decide whether to generate a NEW AI image ('IMAGE') or use a clip from the demo video ('VIDEO').

RULES:
1. Use 'VIDEO' ONLY if the uploaded frames clearly show the feature mentioned in that part of the script.
2. If 'VIDEO', provide the start and end timestamp based on the provided frames.
3. If 'IMAGE', provide a highly detailed prompt for an AI image generator (modern, 3D, high-tech style).
4. Keep descriptions and prompts concise (under 50 words).

OUTPUT:
Return a raw JSON Array of objects. Do not include markdown formatting.
Schema:
[
  {{
    "type": "IMAGE" | "VIDEO",
    "description": "string",
    "imagePrompt": "string",
    "videoStartTime": number,
    "videoEndTime": number
  }}
]
"""


def parse_plan(raw_text: str | None) -> list[VisualPlanItem]:
    """Clean, parse and validate a plan; raises PlanParseError."""
    cleaned = clean_json(raw_text or "[]")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("plan_json_parse_failed", error=str(e), raw_text=raw_text, cleaned_text=cleaned)
        raise PlanParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list) or not data:
        logger.error("plan_not_a_list", raw_text=raw_text, cleaned_text=cleaned)
        raise PlanParseError("Plan must be a non-empty JSON array")

    try:
        return _PLAN_ADAPTER.validate_python(data)
    except ValidationError as e:
        logger.error(
            "plan_validation_failed",
            errors=e.error_count(),
            raw_text=raw_text,
            cleaned_text=cleaned,
        )
        raise PlanParseError(f"Plan items do not match schema: {e.error_count()} errors") from e


def sanitize_video_items(
    items: list[VisualPlanItem],
    frames: list[VideoFrame] | None,
) -> list[VisualPlanItem]:
    """Keep VIDEO scenes inside the range covered by the supplied frames.

    Without frames there is nothing to cut from, so VIDEO scenes become
    IMAGE scenes. With frames, given timestamps are clamped to the first and
    last frame; a missing start becomes the first frame and a missing end
    becomes start + DEFAULT_CLIP_SECONDS (capped at the last frame). A clip
    that collapses to nothing becomes an IMAGE scene.
    """
    if not frames:
        return [item.as_image() if item.type == SceneType.VIDEO else item for item in items]

    timestamps = [f.timestamp for f in frames]
    lo, hi = min(timestamps), max(timestamps)

    def clamp(value: float) -> float:
        return min(max(value, lo), hi)

    sanitized = []
    for item in items:
        if item.type != SceneType.VIDEO:
            sanitized.append(item)
            continue

        start = lo if item.video_start_time is None else clamp(item.video_start_time)
        if item.video_end_time is None:
            end = min(start + DEFAULT_CLIP_SECONDS, hi)
        else:
            end = clamp(item.video_end_time)
        if end <= start:
            logger.warning(
                "video_scene_out_of_range",
                description=item.description,
                start=item.video_start_time,
                end=item.video_end_time,
                frame_range=(lo, hi),
            )
            sanitized.append(item.as_image())
            continue

        sanitized.append(
            item.model_copy(update={"video_start_time": start, "video_end_time": end})
        )
    return sanitized


# =============================================================================
# Visual Planner Agent
# =============================================================================


class VisualPlannerAgent(BaseAgent[VisualPlannerInput, VisualPlannerOutput]):
    """Requests a structured scene breakdown from the multimodal model."""

    def __init__(
        self,
        provider: ModelProvider,
        settings: Settings,
        progress: ProgressReporter | None = None,
    ):
        super().__init__(
            AgentConfig(name="VisualPlannerAgent", model=settings.planner_model),
            progress=progress,
        )
        self.provider = provider
        self.max_context_frames = settings.max_context_frames
        self.max_output_tokens = settings.planner_max_output_tokens

    async def execute(self, input: VisualPlannerInput) -> VisualPlannerOutput:
        """Plan the visuals, falling back to the fixed plan on any failure."""
        self.progress.emit("Analyzing script for visual plan...", ProgressLevel.INFO)

        frames = select_context_frames(input.video_frames or [], self.max_context_frames)
        contents: list[ContentPart] = build_frame_parts(frames)
        contents.append(
            build_plan_prompt(input.script, build_code_context(input.files), bool(frames))
        )

        config = GenerationConfig(
            response_mime_type="application/json",
            response_schema=PLAN_RESPONSE_SCHEMA,
            max_output_tokens=self.max_output_tokens,
        )

        try:
            response = await self.provider.generate(self.config.model, contents, config)
            items = parse_plan(response.text)
        except Exception as e:
            self.progress.emit(
                "Visual plan generation failed, using fallback.",
                ProgressLevel.ERROR,
                error_type=type(e).__name__,
                error=str(e),
            )
            return VisualPlannerOutput(result=fallback_plan(error=str(e)))

        items = sanitize_video_items(items, input.video_frames)
        self.progress.emit("Visual plan created.", ProgressLevel.SUCCESS, scenes=len(items))
        return VisualPlannerOutput(result=PlanResult(items=items, source=PlanSource.MODEL))
