"""Voiceover, image and scene asset generation."""

from reelforge.generation.audio import (
    AudioBuffer,
    AudioDecodeError,
    decode_audio_data,
)
from reelforge.generation.voice import (
    EmptyScriptError,
    MissingAudioError,
    VoiceoverResult,
    VoiceSynthesisError,
    VoiceSynthesizer,
)
from reelforge.generation.image_backends import (
    FluxSpaceBackend,
    GeminiImageBackend,
    GeneratedImage,
    ImageGeneratorBackend,
    sniff_image,
)
from reelforge.generation.asset_generator import AssetGenerator
from reelforge.generation.pipeline import (
    PipelineResult,
    PromoVideoPipeline,
    write_run_artifacts,
)

__all__ = [
    # Audio
    "AudioBuffer",
    "AudioDecodeError",
    "decode_audio_data",
    # Voice
    "EmptyScriptError",
    "MissingAudioError",
    "VoiceoverResult",
    "VoiceSynthesisError",
    "VoiceSynthesizer",
    # Images
    "FluxSpaceBackend",
    "GeminiImageBackend",
    "GeneratedImage",
    "ImageGeneratorBackend",
    "sniff_image",
    # Assets
    "AssetGenerator",
    # Pipeline
    "PipelineResult",
    "PromoVideoPipeline",
    "write_run_artifacts",
]
