"""Script Writer Agent - turns project files into a spoken-word promo script."""

from __future__ import annotations

from pydantic import BaseModel

from reelforge.agents.base import AgentConfig, AgentError, BaseAgent
from reelforge.common.config import Settings
from reelforge.common.logging import ProgressLevel, ProgressReporter, get_logger
from reelforge.common.models import Platform, ProjectFile
from reelforge.providers import ModelProvider

logger = get_logger(__name__)

FILE_EXCERPT_CHARS = 10_000
SCRIPT_FAILURE_PLACEHOLDER = "Failed to generate script."

GENERIC_INSTRUCTIONS = "FORMAT: Standard ad. Tone: Professional, persuasive."

PLATFORM_INSTRUCTIONS: dict[Platform, str] = {
    Platform.YOUTUBE: "FORMAT: Educational tutorial style. Tone: Authoritative, helpful.",
    Platform.TIKTOK: "FORMAT: Viral TikTok style. High energy. Start with a hook. Tone: Hype, fast.",
    Platform.INSTAGRAM: "FORMAT: Aesthetic Instagram Reel. Tone: Trendy, polished.",
    Platform.GENERIC: GENERIC_INSTRUCTIONS,
}


# =============================================================================
# Input/Output Models
# =============================================================================


class ScriptWriterInput(BaseModel):
    """Input for the Script Writer Agent."""

    files: list[ProjectFile]
    platform: Platform = Platform.GENERIC
    reference_url: str | None = None


class ScriptWriterOutput(BaseModel):
    """Output from the Script Writer Agent."""

    script: str


class ScriptGenerationError(AgentError):
    """Raised when the script request fails. Nothing downstream can run."""

    def __init__(self, message: str = SCRIPT_FAILURE_PLACEHOLDER):
        super().__init__(message, recoverable=False)


# =============================================================================
# Prompt building
# =============================================================================


def platform_instructions(platform: Platform | str) -> str:
    """Tone/format block for a platform; unknown values get the generic block."""
    return PLATFORM_INSTRUCTIONS.get(platform, GENERIC_INSTRUCTIONS)


def build_file_context(files: list[ProjectFile]) -> str:
    return "\n\n".join(
        f"--- FILE: {f.name} ---\n{f.content[:FILE_EXCERPT_CHARS]}" for f in files
    )


def build_script_prompt(
    files: list[ProjectFile],
    platform: Platform,
    reference_url: str | None = None,
) -> str:
    platform_name = platform.value if isinstance(platform, Platform) else str(platform)
    reference = (
        f"\nSTYLE REFERENCE: Match the pacing and energy of {reference_url}\n"
        if reference_url
        else ""
    )
    return f"""
You are a viral content creator.
TASK: Write a 30-45 second voiceover script for {platform_name}.

TONE: Conversational, authentic.
{platform_instructions(platform)}
{reference}
CRITICAL:
1. The script must LOOP seamlessly.
2. Output ONLY the spoken words.
3. Do NOT include "Speaker:" labels, scene descriptions, music cues, or stage directions in brackets.

PROJECT FILES:
{build_file_context(files)}
"""


# =============================================================================
# Script Writer Agent
# =============================================================================


class ScriptWriterAgent(BaseAgent[ScriptWriterInput, ScriptWriterOutput]):
    """
    Requests a voiceover script from the language model.

    Single shot, no retry: a failed request raises ScriptGenerationError,
    an empty response yields the failure placeholder text.
    """

    def __init__(
        self,
        provider: ModelProvider,
        settings: Settings,
        progress: ProgressReporter | None = None,
    ):
        super().__init__(
            AgentConfig(name="ScriptWriterAgent", model=settings.script_model),
            progress=progress,
        )
        self.provider = provider

    async def execute(self, input: ScriptWriterInput) -> ScriptWriterOutput:
        """Generate the script."""
        self.progress.emit("Generating script with Gemini...", ProgressLevel.INFO)
        prompt = build_script_prompt(input.files, input.platform, input.reference_url)

        try:
            response = await self.provider.generate(self.config.model, prompt)
        except Exception as e:
            self.progress.emit(
                f"Script generation failed: {e}",
                ProgressLevel.ERROR,
                error_type=type(e).__name__,
            )
            raise ScriptGenerationError() from e

        script = response.text
        if not script:
            logger.warning("script_response_empty", model=self.config.model)
            script = SCRIPT_FAILURE_PLACEHOLDER
        else:
            self.progress.emit(
                "Script generated successfully.",
                ProgressLevel.SUCCESS,
                chars=len(script),
            )

        return ScriptWriterOutput(script=script)
