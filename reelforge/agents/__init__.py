"""Model-backed agents for the promo pipeline."""

from reelforge.agents.base import (
    AgentConfig,
    AgentError,
    AgentMetrics,
    BaseAgent,
)
from reelforge.agents.script_writer import (
    ScriptGenerationError,
    ScriptWriterAgent,
    ScriptWriterInput,
    ScriptWriterOutput,
)
from reelforge.agents.visual_planner import (
    VisualPlannerAgent,
    VisualPlannerInput,
    VisualPlannerOutput,
    select_context_frames,
)

__all__ = [
    # Base
    "AgentConfig",
    "AgentError",
    "AgentMetrics",
    "BaseAgent",
    # Script writer
    "ScriptGenerationError",
    "ScriptWriterAgent",
    "ScriptWriterInput",
    "ScriptWriterOutput",
    # Visual planner
    "VisualPlannerAgent",
    "VisualPlannerInput",
    "VisualPlannerOutput",
    "select_context_frames",
]
