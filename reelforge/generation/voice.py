"""Voiceover synthesis with bounded retry."""

from __future__ import annotations

import asyncio
import base64
from dataclasses import dataclass
from typing import Awaitable, Callable

from reelforge.common.config import Settings
from reelforge.common.logging import ProgressLevel, ProgressReporter, get_logger
from reelforge.common.models import VoiceOption
from reelforge.common.retry import RetryExhaustedError, RetryPolicy, linear_backoff
from reelforge.common.text import clean_script_for_tts
from reelforge.generation.audio import AudioBuffer, decode_audio_data
from reelforge.providers import GenerationConfig, ModelProvider

logger = get_logger(__name__)


class EmptyScriptError(ValueError):
    """The script contains nothing that can be spoken."""


class VoiceSynthesisError(RuntimeError):
    """Speech synthesis failed on every attempt."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class MissingAudioError(RuntimeError):
    """The speech model answered without an audio payload."""


@dataclass(frozen=True)
class VoiceoverResult:
    """Synthesised voiceover."""

    audio: AudioBuffer
    encoded_audio: str
    voice: str

    @property
    def duration_seconds(self) -> float:
        return self.audio.duration_seconds


class VoiceSynthesizer:
    """Speaks a cleaned script through the TTS model.

    Every failure (transport error, missing payload, undecodable payload)
    is retried with a linearly growing delay, including after the last
    attempt.
    """

    def __init__(
        self,
        provider: ModelProvider,
        settings: Settings,
        progress: ProgressReporter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.model = settings.tts_model
        self.sample_rate = settings.tts_sample_rate
        self.channels = settings.tts_channels
        self.progress = progress or ProgressReporter()
        self.retry_policy: RetryPolicy[VoiceoverResult] = RetryPolicy(
            max_attempts=settings.tts_max_attempts,
            backoff=linear_backoff(settings.tts_retry_delay_seconds),
            delay_after_final_attempt=True,
            sleep=sleep,
            name="tts",
        )

    async def synthesize(self, text: str, voice: VoiceOption | str) -> VoiceoverResult:
        """Synthesize ``text`` with ``voice``.

        Raises:
            EmptyScriptError: the cleaned script is empty (no request is made)
            VoiceSynthesisError: every attempt failed
        """
        voice_name = voice.value if isinstance(voice, VoiceOption) else str(voice)
        self.progress.emit(f"Generating voiceover ({voice_name})...", ProgressLevel.INFO)

        clean_text = clean_script_for_tts(text)
        if not clean_text:
            raise EmptyScriptError("Script is empty (or contained only unreadable content).")

        config = GenerationConfig(response_modalities=("AUDIO",), voice_name=voice_name)

        async def attempt_synthesis(attempt: int) -> VoiceoverResult:
            response = await self.provider.generate(self.model, clean_text, config)
            inline = response.first_inline()
            if inline is None:
                raise MissingAudioError("No audio data received from API.")

            audio = decode_audio_data(inline.data, self.sample_rate, self.channels)
            return VoiceoverResult(
                audio=audio,
                encoded_audio=base64.b64encode(inline.data).decode("ascii"),
                voice=voice_name,
            )

        def report_failure(attempt: int, error: BaseException | None) -> None:
            self.progress.emit(
                f"TTS Attempt {attempt} failed: {error}",
                ProgressLevel.WARNING,
                attempt=attempt,
            )

        try:
            result = await self.retry_policy.run(attempt_synthesis, on_failure=report_failure)
        except RetryExhaustedError as e:
            self.progress.emit("TTS final failure.", ProgressLevel.ERROR)
            last_message = str(e.last_error) if e.last_error else ""
            raise VoiceSynthesisError(
                f"Failed to generate audio after {e.attempts} attempts. {last_message}".strip(),
                attempts=e.attempts,
            ) from e

        self.progress.emit(
            "Voiceover generated successfully.",
            ProgressLevel.SUCCESS,
            duration_seconds=round(result.duration_seconds, 2),
        )
        return result
