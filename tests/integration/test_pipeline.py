"""End-to-end pipeline tests with fake model and image providers.

No network access: the language model, speech model and image space are
all replaced by in-process fakes.
"""

import importlib.util
import json
import random
from pathlib import Path

import pytest

from conftest import (
    FakeGradioClient,
    FakeProvider,
    inline_response,
    make_frames,
    make_png,
    text_response,
)
from reelforge.agents import ScriptGenerationError
from reelforge.common.models import (
    ImageAsset,
    Platform,
    PlanSource,
    VideoAsset,
    VoiceOption,
)
from reelforge.generation import (
    AssetGenerator,
    FluxSpaceBackend,
    GeminiImageBackend,
    PromoVideoPipeline,
    VoiceSynthesisError,
    VoiceSynthesizer,
    write_run_artifacts,
)

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "generate_promo.py"
SCRIPT = "**Stop scrolling.** [whoosh] TaskPilot plans your whole day in one tap."
PCM = b"\x00\x00\x10\x00" * 2400
PLAN = [
    {"type": "IMAGE", "description": "Hook", "imagePrompt": "Neon phone on a desk"},
    {"type": "VIDEO", "description": "Demo", "videoStartTime": 1, "videoEndTime": 3},
    {"type": "IMAGE", "description": "Call to Action", "imagePrompt": "Glowing logo"},
]


def model_handler(settings, plan_text=None, png=None):
    """Route each request to a canned reply by model name."""
    png = png or make_png()

    def handler(model, contents, config):
        if model == settings.script_model:
            return text_response(SCRIPT)
        if model == settings.tts_model:
            return inline_response(PCM, "audio/L16;codec=pcm;rate=24000")
        if model == settings.planner_model:
            return text_response(plan_text if plan_text is not None else json.dumps(PLAN))
        if model == settings.image_model:
            return inline_response(png, "image/png")
        raise AssertionError(f"unexpected model {model}")

    return handler


def build_pipeline(settings, provider, gradio_client, sleep, progress=None):
    return PromoVideoPipeline(
        settings,
        provider,
        progress=progress,
        voice_synthesizer=VoiceSynthesizer(provider, settings, progress=progress, sleep=sleep),
        asset_generator=AssetGenerator(
            primary=FluxSpaceBackend(
                settings,
                progress=progress,
                client_factory=lambda space, token: gradio_client,
                sleep=sleep,
                rng=random.Random(1),
            ),
            fallback=GeminiImageBackend(provider, settings, progress=progress),
            progress=progress,
        ),
    )


class TestPromoPipeline:
    """Full pipeline runs."""

    @pytest.mark.asyncio
    async def test_tiktok_run_with_flux(
        self, settings, sample_files, recording_sleep, tmp_path, png_bytes
    ):
        flux_file = tmp_path / "flux.png"
        flux_file.write_bytes(png_bytes)
        gradio = FakeGradioClient([(str(flux_file), 11)])
        provider = FakeProvider(model_handler(settings))
        pipeline = build_pipeline(settings, provider, gradio, recording_sleep)

        result = await pipeline.run(
            sample_files,
            platform=Platform.TIKTOK,
            voice=VoiceOption.FENRIR,
            video_frames=make_frames(6),
            video_url="file:///demo.mp4",
        )

        # Stage order: script, voice, plan; images all came from flux
        assert [c.model for c in provider.calls] == [
            settings.script_model,
            settings.tts_model,
            settings.planner_model,
        ]
        assert provider.calls[1].contents == (
            "Stop scrolling. TaskPilot plans your whole day in one tap."
        )
        assert result.voice == "Fenrir"
        assert result.voiceover.duration_seconds == pytest.approx(0.2)
        assert result.plan.source == PlanSource.MODEL

        assert isinstance(result.assets[0], ImageAsset)
        assert isinstance(result.assets[1], VideoAsset)
        assert result.assets[1].video_url == "file:///demo.mp4"
        assert isinstance(result.assets[2], ImageAsset)
        assert result.missing_asset_count == 0

        assert len(gradio.predict_calls) == 2
        for args, _ in gradio.predict_calls:
            assert args[3:5] == (768, 1024)

    @pytest.mark.asyncio
    async def test_youtube_run_falls_back_to_gemini(
        self, settings, sample_files, recording_sleep, progress, progress_recorder
    ):
        gradio = FakeGradioClient([RuntimeError("ZeroGPU quota exceeded")])
        provider = FakeProvider(model_handler(settings))
        pipeline = build_pipeline(settings, provider, gradio, recording_sleep, progress=progress)

        result = await pipeline.run(sample_files, platform=Platform.YOUTUBE)

        # No frames, so the VIDEO scene is planned as an image
        assert all(isinstance(a, ImageAsset) for a in result.assets)
        assert all(a.provider == "gemini_image" for a in result.assets)

        image_calls = [c for c in provider.calls if c.model == settings.image_model]
        assert len(image_calls) == 3
        assert all(c.config.aspect_ratio == "16:9" for c in image_calls)
        for args, _ in gradio.predict_calls:
            assert args[3:5] == (1024, 768)
        assert result.generation_report["fallback_count"] == 3
        assert progress_recorder.messages.count("Switching to Gemini Fallback...") == 3

    @pytest.mark.asyncio
    async def test_supplied_script_skips_generation(
        self, settings, sample_files, recording_sleep, png_bytes, tmp_path
    ):
        flux_file = tmp_path / "flux.png"
        flux_file.write_bytes(png_bytes)
        provider = FakeProvider(model_handler(settings))
        pipeline = build_pipeline(
            settings, provider, FakeGradioClient([(str(flux_file), 1)]), recording_sleep
        )

        result = await pipeline.run(
            sample_files, platform=Platform.GENERIC, script="Reviewed script."
        )

        assert result.script == "Reviewed script."
        assert settings.script_model not in [c.model for c in provider.calls]

    @pytest.mark.asyncio
    async def test_bad_plan_uses_fallback_and_writes_artifacts(
        self, settings, sample_files, recording_sleep, tmp_path
    ):
        gradio = FakeGradioClient([RuntimeError("space sleeping")])

        def handler(model, contents, config):
            if model == settings.image_model:
                return text_response("no image today")
            return model_handler(settings, plan_text="Sorry, I can't plan that.")(
                model, contents, config
            )

        provider = FakeProvider(handler)
        pipeline = build_pipeline(settings, provider, gradio, recording_sleep)

        result = await pipeline.run(sample_files, platform=Platform.INSTAGRAM)

        assert result.plan.used_fallback
        assert result.assets == [None, None, None, None]
        assert result.missing_asset_count == 4

        run_dir = write_run_artifacts(result, tmp_path / "out")

        assert (run_dir / "script.txt").read_text() == SCRIPT
        assert (run_dir / "voiceover.wav").read_bytes()[:4] == b"RIFF"
        plan_doc = json.loads((run_dir / "visual_plan.json").read_text())
        assert plan_doc["source"] == "fallback"
        assert len(plan_doc["items"]) == 4
        manifest = json.loads((run_dir / "assets.json").read_text())
        assert manifest["assets"] == [None, None, None, None]
        assert manifest["missing_assets"] == 4

    @pytest.mark.asyncio
    async def test_artifacts_for_images_and_clips(
        self, settings, sample_files, recording_sleep, tmp_path, png_bytes
    ):
        flux_file = tmp_path / "flux.png"
        flux_file.write_bytes(png_bytes)
        provider = FakeProvider(model_handler(settings))
        pipeline = build_pipeline(
            settings, provider, FakeGradioClient([(str(flux_file), 1)]), recording_sleep
        )

        result = await pipeline.run(
            sample_files, platform=Platform.TIKTOK, video_frames=make_frames(6)
        )
        run_dir = write_run_artifacts(result, tmp_path / "out")

        assert (run_dir / "scene_01.png").read_bytes() == png_bytes
        assert not (run_dir / "scene_02.png").exists()
        assert (run_dir / "scene_03.png").exists()

        manifest = json.loads((run_dir / "assets.json").read_text())
        assert manifest["assets"][0]["file"] == "scene_01.png"
        assert manifest["assets"][1]["videoStart"] == 1.0
        assert manifest["assets"][1]["videoEnd"] == 3.0
        assert manifest["platform"] == "TikTok"

    @pytest.mark.asyncio
    async def test_report_counts_only_current_run(
        self, settings, sample_files, recording_sleep, tmp_path, png_bytes
    ):
        flux_file = tmp_path / "flux.png"
        flux_file.write_bytes(png_bytes)
        provider = FakeProvider(model_handler(settings))
        pipeline = build_pipeline(
            settings, provider, FakeGradioClient([(str(flux_file), 1)]), recording_sleep
        )

        first = await pipeline.run(
            sample_files, platform=Platform.TIKTOK, video_frames=make_frames(6)
        )
        second = await pipeline.run(
            sample_files, platform=Platform.TIKTOK, video_frames=make_frames(6)
        )

        assert first.generation_report["primary_count"] == 2
        assert second.generation_report["primary_count"] == 2
        assert second.generation_report["video_count"] == 1

        run_dir = write_run_artifacts(second, tmp_path / "out")
        manifest = json.loads((run_dir / "assets.json").read_text())
        assert manifest["generation_report"]["primary_count"] == 2

    @pytest.mark.asyncio
    async def test_summary_prints_agent_metrics(
        self, settings, sample_files, recording_sleep, tmp_path, png_bytes, capsys
    ):
        module_spec = importlib.util.spec_from_file_location("generate_promo", SCRIPT_PATH)
        cli = importlib.util.module_from_spec(module_spec)
        module_spec.loader.exec_module(cli)

        flux_file = tmp_path / "flux.png"
        flux_file.write_bytes(png_bytes)
        provider = FakeProvider(model_handler(settings))
        pipeline = build_pipeline(
            settings, provider, FakeGradioClient([(str(flux_file), 1)]), recording_sleep
        )
        result = await pipeline.run(sample_files, platform=Platform.TIKTOK)

        cli.print_summary(
            result,
            tmp_path,
            agent_metrics=[
                pipeline.script_writer.get_metrics(),
                pipeline.visual_planner.get_metrics(),
            ],
        )
        out = capsys.readouterr().out

        assert "ScriptWriterAgent: 1/1 ok" in out
        assert "VisualPlannerAgent: 1/1 ok" in out


class TestPipelineFailures:
    """Stages that halt the run."""

    @pytest.mark.asyncio
    async def test_script_failure_halts(self, settings, sample_files, recording_sleep):
        provider = FakeProvider(lambda *_: ConnectionError("offline"))
        pipeline = build_pipeline(settings, provider, FakeGradioClient([None]), recording_sleep)

        with pytest.raises(ScriptGenerationError):
            await pipeline.run(sample_files, platform=Platform.TIKTOK)

        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_voice_failure_halts(self, settings, sample_files, recording_sleep):
        def handler(model, contents, config):
            if model == settings.tts_model:
                return RuntimeError("tts unavailable")
            return model_handler(settings)(model, contents, config)

        provider = FakeProvider(handler)
        pipeline = build_pipeline(settings, provider, FakeGradioClient([None]), recording_sleep)

        with pytest.raises(VoiceSynthesisError):
            await pipeline.run(sample_files, platform=Platform.TIKTOK)

        assert settings.planner_model not in [c.model for c in provider.calls]
        assert recording_sleep.delays == [2.0, 4.0, 6.0]
