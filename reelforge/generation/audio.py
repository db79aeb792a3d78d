"""PCM decoding into playable audio buffers."""

from __future__ import annotations

import io
import wave
from dataclasses import dataclass
from pathlib import Path

import numpy as np

SAMPLE_WIDTH_BYTES = 2  # 16-bit PCM


class AudioDecodeError(ValueError):
    """Raised when a PCM payload cannot be decoded."""


@dataclass(frozen=True)
class AudioBuffer:
    """Decoded audio: float32 samples shaped (channels, frames) in [-1, 1)."""

    samples: np.ndarray
    sample_rate: int
    channels: int

    @property
    def frame_count(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate

    def to_pcm16(self) -> bytes:
        """Interleaved little-endian 16-bit PCM."""
        clipped = np.clip(self.samples, -1.0, 32767 / 32768)
        interleaved = (clipped.T * 32768.0).round().astype("<i2")
        return interleaved.tobytes()

    def to_wav_bytes(self) -> bytes:
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(SAMPLE_WIDTH_BYTES)
            wf.setframerate(self.sample_rate)
            wf.writeframes(self.to_pcm16())
        return buffer.getvalue()

    def write_wav(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_wav_bytes())
        return path


def decode_audio_data(
    data: bytes,
    sample_rate: int = 24000,
    channels: int = 1,
) -> AudioBuffer:
    """Decode raw little-endian 16-bit PCM into an AudioBuffer."""
    if channels < 1:
        raise AudioDecodeError(f"Invalid channel count: {channels}")
    if not data:
        raise AudioDecodeError("Audio payload is empty")

    frame_size = SAMPLE_WIDTH_BYTES * channels
    if len(data) % frame_size:
        raise AudioDecodeError(
            f"Audio payload of {len(data)} bytes is not a whole number of "
            f"{channels}-channel 16-bit frames"
        )

    pcm = np.frombuffer(data, dtype="<i2")
    samples = (pcm.astype(np.float32) / 32768.0).reshape(-1, channels).T
    return AudioBuffer(samples=samples, sample_rate=sample_rate, channels=channels)
