"""Promo video pipeline: script -> voiceover -> visual plan -> assets.

Stages run strictly in sequence. Script and voice failures halt the run;
a planning failure is absorbed by the fallback plan; a scene whose assets
all fail leaves a ``None`` hole in ``PipelineResult.assets``.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from reelforge.agents import (
    ScriptWriterAgent,
    ScriptWriterInput,
    VisualPlannerAgent,
    VisualPlannerInput,
)
from reelforge.common.config import Settings
from reelforge.common.logging import ProgressLevel, ProgressReporter, get_logger
from reelforge.common.models import (
    ImageAsset,
    Platform,
    PlanResult,
    ProjectFile,
    VideoAsset,
    VideoFrame,
    VisualAsset,
    VoiceOption,
    generate_id,
)
from reelforge.generation.asset_generator import AssetGenerator
from reelforge.generation.image_backends import FluxSpaceBackend, GeminiImageBackend
from reelforge.generation.voice import VoiceoverResult, VoiceSynthesizer
from reelforge.providers import ModelProvider

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Everything a run produced, held in memory."""

    run_id: str
    platform: Platform
    voice: str
    script: str
    voiceover: VoiceoverResult
    plan: PlanResult
    assets: list[VisualAsset | None]
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_seconds: float = 0.0
    generation_report: dict[str, Any] = field(default_factory=dict)

    @property
    def missing_asset_count(self) -> int:
        return sum(1 for asset in self.assets if asset is None)

    def summary(self) -> dict[str, Any]:
        """Return a summary dict for logging."""
        return {
            "run_id": self.run_id,
            "platform": self.platform.value,
            "voice": self.voice,
            "script_chars": len(self.script),
            "voiceover_seconds": round(self.voiceover.duration_seconds, 2),
            "scenes": len(self.plan.items),
            "plan_source": self.plan.source.value,
            "missing_assets": self.missing_asset_count,
            "duration_seconds": round(self.duration_seconds, 2),
        }


class PromoVideoPipeline:
    """Runs one project end to end with injected collaborators."""

    def __init__(
        self,
        settings: Settings,
        provider: ModelProvider,
        *,
        progress: ProgressReporter | None = None,
        script_writer: ScriptWriterAgent | None = None,
        voice_synthesizer: VoiceSynthesizer | None = None,
        visual_planner: VisualPlannerAgent | None = None,
        asset_generator: AssetGenerator | None = None,
    ):
        self.settings = settings
        self.progress = progress or ProgressReporter()
        self.script_writer = script_writer or ScriptWriterAgent(
            provider, settings, progress=self.progress
        )
        self.voice_synthesizer = voice_synthesizer or VoiceSynthesizer(
            provider, settings, progress=self.progress
        )
        self.visual_planner = visual_planner or VisualPlannerAgent(
            provider, settings, progress=self.progress
        )
        self.asset_generator = asset_generator or AssetGenerator(
            primary=FluxSpaceBackend(settings, progress=self.progress),
            fallback=GeminiImageBackend(provider, settings, progress=self.progress),
            progress=self.progress,
        )

    async def run(
        self,
        files: list[ProjectFile],
        platform: Platform,
        voice: VoiceOption | str = VoiceOption.KORE,
        reference_url: str | None = None,
        video_frames: list[VideoFrame] | None = None,
        script: str | None = None,
        video_url: str | None = None,
    ) -> PipelineResult:
        """Generate script, voiceover, plan and assets for one project.

        Args:
            files: Extracted project files, in priority order
            platform: Target platform (drives tone and image orientation)
            voice: Speech voice
            reference_url: Optional style reference for the script
            video_frames: Frames sampled from a demo video, if any
            script: A reviewed script; skips script generation when given
            video_url: Source video location attached to VIDEO assets

        Raises:
            ScriptGenerationError: the script request failed
            EmptyScriptError / VoiceSynthesisError: no voiceover could be made
        """
        start_time = time.time()
        run_id = generate_id("run")
        voice_name = voice.value if isinstance(voice, VoiceOption) else str(voice)

        logger.info(
            "pipeline_start",
            run_id=run_id,
            files=len(files),
            platform=platform.value,
            voice=voice_name,
            frames=len(video_frames or []),
            script_supplied=script is not None,
        )

        if script is None:
            output = await self.script_writer(
                ScriptWriterInput(files=files, platform=platform, reference_url=reference_url)
            )
            script = output.script

        voiceover = await self.voice_synthesizer.synthesize(script, voice_name)

        plan_output = await self.visual_planner(
            VisualPlannerInput(script=script, files=files, video_frames=video_frames)
        )
        plan = plan_output.result

        self.asset_generator.reset_tracking()
        self.asset_generator.video_url = video_url
        assets = await self.asset_generator.generate_all(plan.items, platform)

        result = PipelineResult(
            run_id=run_id,
            platform=platform,
            voice=voice_name,
            script=script,
            voiceover=voiceover,
            plan=plan,
            assets=assets,
            duration_seconds=time.time() - start_time,
            generation_report=self.asset_generator.get_generation_report(),
        )

        if result.missing_asset_count:
            self.progress.emit(
                f"{result.missing_asset_count} scene(s) have no visual asset.",
                ProgressLevel.WARNING,
            )
        logger.info("pipeline_complete", **result.summary())
        return result


def write_run_artifacts(result: PipelineResult, output_dir: str | Path) -> Path:
    """Write script, audio, plan and scene assets under ``output_dir/<run_id>``."""
    run_dir = Path(output_dir) / result.run_id
    run_dir.mkdir(parents=True, exist_ok=True)

    (run_dir / "script.txt").write_text(result.script, encoding="utf-8")
    result.voiceover.audio.write_wav(run_dir / "voiceover.wav")

    plan_doc = {
        "source": result.plan.source.value,
        "error": result.plan.error,
        "items": [
            item.model_dump(mode="json", by_alias=True, exclude_none=True)
            for item in result.plan.items
        ],
    }
    (run_dir / "visual_plan.json").write_text(json.dumps(plan_doc, indent=2), encoding="utf-8")

    manifest: list[dict[str, Any] | None] = []
    for index, asset in enumerate(result.assets, start=1):
        if isinstance(asset, ImageAsset):
            filename = f"scene_{index:02d}.{asset.file_extension}"
            (run_dir / filename).write_bytes(asset.data)
            manifest.append(
                {
                    "type": "image",
                    "file": filename,
                    "description": asset.description,
                    "prompt": asset.prompt,
                    "provider": asset.provider,
                }
            )
        elif isinstance(asset, VideoAsset):
            manifest.append(asset.model_dump(mode="json", by_alias=True, exclude_none=True))
        else:
            manifest.append(None)

    report = {
        **result.summary(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "generation_report": result.generation_report,
        "assets": manifest,
    }
    (run_dir / "assets.json").write_text(json.dumps(report, indent=2), encoding="utf-8")

    logger.info("run_artifacts_written", run_id=result.run_id, path=str(run_dir))
    return run_dir
