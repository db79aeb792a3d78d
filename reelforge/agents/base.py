"""Base agent class and utilities."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from reelforge.common.logging import ProgressReporter, get_logger

TInput = TypeVar("TInput", bound=BaseModel)
TOutput = TypeVar("TOutput", bound=BaseModel)


@dataclass
class AgentMetrics:
    """Metrics collected during agent execution."""

    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    total_duration_seconds: float = 0.0

    def record_success(self, duration: float) -> None:
        """Record a successful execution."""
        self.total_calls += 1
        self.successful_calls += 1
        self.total_duration_seconds += duration

    def record_failure(self, duration: float) -> None:
        """Record a failed execution."""
        self.total_calls += 1
        self.failed_calls += 1
        self.total_duration_seconds += duration

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total_calls == 0:
            return 0.0
        return self.successful_calls / self.total_calls

    @property
    def average_duration(self) -> float:
        """Calculate average duration."""
        if self.successful_calls == 0:
            return 0.0
        return self.total_duration_seconds / self.successful_calls


@dataclass
class AgentConfig:
    """Configuration for an agent."""

    name: str
    model: str = ""
    extra: dict[str, Any] = field(default_factory=dict)


class AgentError(Exception):
    """Base exception for agent errors."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.recoverable = recoverable


class BaseAgent(ABC, Generic[TInput, TOutput]):
    """
    Base class for the model-backed agents of the pipeline.

    Agents transform a typed input into a typed output with a single model
    call. The base class handles logging and metrics; retry and fallback
    behaviour belongs to each agent.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
        progress: ProgressReporter | None = None,
    ):
        """Initialize the agent."""
        self.config = config or AgentConfig(name=self.__class__.__name__)
        self.logger = get_logger(self.config.name)
        self.metrics = AgentMetrics()
        self.progress = progress or ProgressReporter()

    @property
    def name(self) -> str:
        """Get the agent name."""
        return self.config.name

    @abstractmethod
    async def execute(self, input: TInput) -> TOutput:
        """
        Execute the agent's primary function.

        Args:
            input: The typed input for this agent

        Returns:
            The typed output from this agent

        Raises:
            AgentError: If execution fails
        """
        pass

    async def __call__(self, input: TInput) -> TOutput:
        """
        Execute the agent with logging, metrics, and error handling.

        Args:
            input: The typed input for this agent

        Returns:
            The typed output from this agent
        """
        start_time = time.time()

        self.logger.info(
            "agent_execution_start",
            agent=self.name,
            model=self.config.model,
            input_type=type(input).__name__,
        )

        try:
            output = await self.execute(input)
            duration = time.time() - start_time

            self.metrics.record_success(duration)
            self.logger.info(
                "agent_execution_success",
                agent=self.name,
                duration_seconds=round(duration, 3),
                output_type=type(output).__name__,
            )

            return output

        except Exception as e:
            duration = time.time() - start_time
            self.metrics.record_failure(duration)

            self.logger.error(
                "agent_execution_failed",
                agent=self.name,
                duration_seconds=round(duration, 3),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise

    def get_metrics(self) -> dict[str, Any]:
        """Get current metrics as a dictionary."""
        return {
            "name": self.name,
            "total_calls": self.metrics.total_calls,
            "successful_calls": self.metrics.successful_calls,
            "failed_calls": self.metrics.failed_calls,
            "success_rate": self.metrics.success_rate,
            "average_duration_seconds": self.metrics.average_duration,
        }
