"""Project input models: source files, target platform, voice and demo frames."""

from __future__ import annotations

import base64
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ProjectFile(BaseModel):
    """A text file extracted from the uploaded project archive."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: str


class Platform(str, Enum):
    """Target publishing platform."""

    TIKTOK = "TikTok"
    YOUTUBE = "YouTube"
    INSTAGRAM = "Instagram"
    GENERIC = "General Ad"

    @property
    def is_portrait(self) -> bool:
        return self in (Platform.TIKTOK, Platform.INSTAGRAM)

    @property
    def image_size(self) -> tuple[int, int]:
        """(width, height) requested from the image model."""
        return (768, 1024) if self.is_portrait else (1024, 768)

    @property
    def aspect_ratio(self) -> str:
        return "9:16" if self.is_portrait else "16:9"

    @classmethod
    def parse(cls, value: str) -> "Platform":
        """Resolve a platform from its value or member name, case-insensitively."""
        needle = value.strip().lower()
        for platform in cls:
            if needle in (platform.value.lower(), platform.name.lower()):
                return platform
        raise ValueError(f"Unknown platform: {value!r}")


class VoiceOption(str, Enum):
    """Prebuilt speech-synthesis voices."""

    KORE = "Kore"
    FENRIR = "Fenrir"
    PUCK = "Puck"
    CHARON = "Charon"
    ZEPHYR = "Zephyr"


class VideoFrame(BaseModel):
    """A still sampled from the demo video (base64 JPEG)."""

    model_config = ConfigDict(frozen=True)

    timestamp: float
    base64: str

    @property
    def data(self) -> bytes:
        return base64.b64decode(self.base64)
