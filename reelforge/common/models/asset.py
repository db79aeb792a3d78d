"""Visual asset models."""

from __future__ import annotations

import base64
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from reelforge.common.models.base import WIRE_MODEL_CONFIG

_MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class ImageAsset(BaseModel):
    """A generated still for one scene."""

    model_config = WIRE_MODEL_CONFIG

    type: Literal["image"] = "image"
    base64: str
    prompt: str
    description: str
    mime_type: str = Field(default="image/png", alias="mimeType")
    provider: str = ""

    @property
    def data(self) -> bytes:
        return base64.b64decode(self.base64)

    @property
    def file_extension(self) -> str:
        return _MIME_EXTENSIONS.get(self.mime_type, "png")


class VideoAsset(BaseModel):
    """A reference to a clip of the uploaded demo video."""

    model_config = WIRE_MODEL_CONFIG

    type: Literal["video"] = "video"
    video_start: float = Field(alias="videoStart")
    video_end: float = Field(alias="videoEnd")
    description: str
    video_url: str | None = Field(default=None, alias="videoUrl")

    @property
    def duration_seconds(self) -> float:
        return max(0.0, self.video_end - self.video_start)


VisualAsset = Annotated[Union[ImageAsset, VideoAsset], Field(discriminator="type")]
