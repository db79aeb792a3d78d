#!/usr/bin/env python3
"""
Reelforge promo generator

Turns a zipped software project into the assets for a short promo video:
1. Extract README and source files from the archive
2. Write a platform-specific voiceover script (or use --script-file)
3. Synthesise the voiceover
4. Plan the visual scenes
5. Generate one image per scene (FLUX.1-schnell, Gemini image fallback)

Output artifacts in <output-dir>/<run_id>/:
- script.txt
- voiceover.wav
- visual_plan.json
- scene_NN.png / scene_NN.jpg
- assets.json

Usage:
    python scripts/generate_promo.py --zip project.zip
    python scripts/generate_promo.py --zip project.zip --platform TikTok --voice Puck
    python scripts/generate_promo.py --zip project.zip --script-file reviewed.txt

Prerequisites:
    GEMINI_API_KEY set in the environment or in .env
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from reelforge.agents import ScriptGenerationError
from reelforge.common.config import Settings
from reelforge.common.logging import (
    ProgressEvent,
    ProgressLevel,
    ProgressReporter,
    get_logger,
    setup_logging,
)
from reelforge.common.models import ImageAsset, Platform, VideoAsset, VoiceOption
from reelforge.generation import (
    AssetGenerator,
    EmptyScriptError,
    FluxSpaceBackend,
    GeminiImageBackend,
    PipelineResult,
    PromoVideoPipeline,
    VoiceSynthesisError,
    write_run_artifacts,
)
from reelforge.ingest import ArchiveError, extract_project_files
from reelforge.providers.gemini import GeminiProvider

logger = get_logger(__name__)

LEVEL_ICONS = {
    ProgressLevel.INFO: "  ·",
    ProgressLevel.SUCCESS: "  ✅",
    ProgressLevel.WARNING: "  ⚠️ ",
    ProgressLevel.ERROR: "  ❌",
    ProgressLevel.CONNECT: "  🔌",
}


def print_progress(event: ProgressEvent) -> None:
    """Echo progress events to the terminal."""
    print(f"{LEVEL_ICONS.get(event.level, '  ·')} {event.message}")


def print_summary(
    result: PipelineResult, run_dir: Path, agent_metrics: Optional[list[dict]] = None
) -> None:
    print("\n" + "=" * 60)
    print("🎬 Promo assets ready")
    print(f"   Run ID: {result.run_id}")
    print(f"   Platform: {result.platform.value}")
    print(f"   Voice: {result.voice} ({result.voiceover.duration_seconds:.1f}s)")
    plan_note = " (fallback plan)" if result.plan.used_fallback else ""
    print(f"   Scenes: {len(result.plan.items)}{plan_note}")
    for index, asset in enumerate(result.assets, start=1):
        if isinstance(asset, ImageAsset):
            print(f"   {index:02d}. image  [{asset.provider}] {asset.description}")
        elif isinstance(asset, VideoAsset):
            print(
                f"   {index:02d}. video  {asset.video_start:.1f}s-{asset.video_end:.1f}s "
                f"{asset.description}"
            )
        else:
            print(f"   {index:02d}. missing")
    print(f"   Output: {run_dir}")
    for metrics in agent_metrics or []:
        print(
            f"   {metrics['name']}: {metrics['successful_calls']}/{metrics['total_calls']} ok, "
            f"avg {metrics['average_duration_seconds']:.2f}s"
        )
    print("=" * 60)


async def run_generation(
    settings: Settings,
    zip_path: Path,
    platform: Platform,
    voice: str,
    reference_url: Optional[str] = None,
    script: Optional[str] = None,
    output_dir: Optional[Path] = None,
) -> bool:
    """Run the pipeline once and write its artifacts. Returns success."""
    try:
        files = extract_project_files(
            zip_path,
            max_files=settings.archive_max_files,
            max_total_chars=settings.archive_max_total_chars,
        )
    except (ArchiveError, FileNotFoundError) as e:
        print(f"\n❌ Could not read archive: {e}")
        return False

    if not files:
        print(f"\n❌ No readable source files found in {zip_path.name}")
        return False
    print(f"\n📦 Extracted {len(files)} files from {zip_path.name}")

    progress = ProgressReporter()
    progress.subscribe(print_progress)

    provider = GeminiProvider(api_key=settings.gemini_api_key)
    asset_generator = AssetGenerator(
        primary=FluxSpaceBackend(settings, progress=progress),
        fallback=GeminiImageBackend(provider, settings, progress=progress),
        progress=progress,
    )
    pipeline = PromoVideoPipeline(
        settings,
        provider,
        progress=progress,
        asset_generator=asset_generator,
    )

    try:
        result = await pipeline.run(
            files,
            platform=platform,
            voice=voice,
            reference_url=reference_url,
            script=script,
        )
    except (ScriptGenerationError, EmptyScriptError, VoiceSynthesisError) as e:
        logger.error("generation_failed", error=str(e), error_type=type(e).__name__)
        print(f"\n❌ Generation failed: {e}")
        return False

    run_dir = write_run_artifacts(result, output_dir or Path(settings.output_dir))
    print_summary(
        result,
        run_dir,
        agent_metrics=[
            pipeline.script_writer.get_metrics(),
            pipeline.visual_planner.get_metrics(),
        ],
    )
    return True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Reelforge - promo video assets from a project archive",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Platforms:
  TikTok      Vertical, fast and energetic (9:16 images)
  YouTube     Landscape, explanatory (16:9 images)
  Instagram   Vertical, visual storytelling (9:16 images)
  General Ad  Landscape, professional (16:9 images)

Examples:
  python scripts/generate_promo.py --zip app.zip --platform YouTube
  python scripts/generate_promo.py --zip app.zip --voice Fenrir --json-logs
""",
    )
    parser.add_argument(
        "--zip",
        type=Path,
        required=True,
        help="Path to the zipped project",
    )
    parser.add_argument(
        "--platform",
        type=str,
        default=Platform.GENERIC.value,
        help="Target platform: TikTok, YouTube, Instagram or 'General Ad' (default: General Ad)",
    )
    parser.add_argument(
        "--voice",
        type=str,
        choices=[v.value for v in VoiceOption],
        default=VoiceOption.KORE.value,
        help="Voiceover voice (default: Kore)",
    )
    parser.add_argument(
        "--reference-url",
        type=str,
        default=None,
        help="Optional style reference URL for the script",
    )
    parser.add_argument(
        "--script-file",
        type=Path,
        default=None,
        help="Use this reviewed script instead of generating one",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Artifact directory (default: settings output_dir)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level override (default: settings log_level)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit JSON log lines",
    )
    args = parser.parse_args()

    settings = Settings()
    setup_logging(
        log_level=args.log_level or settings.log_level,
        json_logs=args.json_logs or settings.json_logs,
    )

    try:
        platform = Platform.parse(args.platform)
    except ValueError as e:
        parser.error(str(e))

    if not settings.has_gemini_key:
        print("\n❌ GEMINI_API_KEY is not set.")
        print("   Export it or add it to .env")
        sys.exit(1)

    script = None
    if args.script_file:
        if not args.script_file.exists():
            parser.error(f"Script file not found: {args.script_file}")
        script = args.script_file.read_text(encoding="utf-8")

    success = asyncio.run(run_generation(
        settings,
        zip_path=args.zip,
        platform=platform,
        voice=args.voice,
        reference_url=args.reference_url,
        script=script,
        output_dir=args.output_dir,
    ))
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
