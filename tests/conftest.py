"""Pytest configuration and fixtures."""

import base64
import io
from dataclasses import dataclass
from typing import Any, Callable

import pytest
from PIL import Image

from reelforge.common.config import Settings
from reelforge.common.logging import ProgressEvent, ProgressReporter
from reelforge.common.models import ProjectFile, VideoFrame
from reelforge.providers import (
    GenerationConfig,
    InlineData,
    ModelProvider,
    ModelResponse,
    ResponsePart,
)


# =============================================================================
# Response helpers
# =============================================================================


def text_response(text: str) -> ModelResponse:
    return ModelResponse(parts=[ResponsePart(text=text)])


def inline_response(data: bytes, mime_type: str) -> ModelResponse:
    return ModelResponse(parts=[ResponsePart(inline_data=InlineData(mime_type=mime_type, data=data))])


def make_png(width: int = 8, height: int = 8, color: str = "purple") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_frames(count: int) -> list[VideoFrame]:
    payload = base64.b64encode(b"\xff\xd8fake-jpeg").decode("ascii")
    return [VideoFrame(timestamp=float(i), base64=payload) for i in range(count)]


# =============================================================================
# Fakes
# =============================================================================


@dataclass
class ProviderCall:
    model: str
    contents: Any
    config: GenerationConfig | None


class FakeProvider(ModelProvider):
    """Scripted ModelProvider.

    ``handler(model, contents, config)`` decides each reply; returning an
    exception instance raises it. Every call is recorded.
    """

    def __init__(self, handler: Callable[[str, Any, GenerationConfig | None], Any]):
        self.handler = handler
        self.calls: list[ProviderCall] = []

    @property
    def name(self) -> str:
        return "fake"

    async def generate(self, model, contents, config=None):
        self.calls.append(ProviderCall(model=model, contents=contents, config=config))
        result = self.handler(model, contents, config)
        if isinstance(result, BaseException):
            raise result
        return result


class RecordingSleep:
    """Stand-in for asyncio.sleep that records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeGradioClient:
    """Records predict() calls and replays scripted results."""

    def __init__(self, results: list[Any]):
        self.results = list(results)
        self.predict_calls: list[tuple[tuple, dict]] = []

    def predict(self, *args, **kwargs):
        self.predict_calls.append((args, kwargs))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, BaseException):
            raise result
        return result


class ProgressRecorder:
    def __init__(self, reporter: ProgressReporter):
        self.events: list[ProgressEvent] = []
        reporter.subscribe(self.events.append)

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.events]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from the developer's environment files."""
    return Settings(gemini_api_key="test-key", _env_file=None)


@pytest.fixture
def progress():
    return ProgressReporter()


@pytest.fixture
def progress_recorder(progress):
    return ProgressRecorder(progress)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def sample_files():
    """A small extracted project."""
    return [
        ProjectFile(
            name="README.md",
            content="# TaskPilot\nA to-do app that plans your day with AI.",
        ),
        ProjectFile(
            name="src/app.py",
            content="def plan_day(tasks):\n    return sorted(tasks, key=lambda t: t.priority)\n",
        ),
    ]
