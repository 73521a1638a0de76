"""
Stage pipeline for logpipe.

A Pipeline chains stages back to back: each stage runs as its own asyncio
task, reading the previous stage's outbound stream and writing its own.
Closing the first stream shuts the whole chain down stage by stage.
"""

import asyncio
import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from logpipe.schemas import Entry
from logpipe.stages.base import RecordStream, Stage, StageConfigError
from logpipe.stages.eventlogmessage import (
    STAGE_TYPE_EVENTLOGMESSAGE,
    EventLogMessageStage,
)
from logpipe.utils.logger import get_logger

logger = get_logger(__name__)

StageFactory = Callable[[Mapping[str, Any] | None], Stage]

_STAGE_FACTORIES: dict[str, StageFactory] = {
    STAGE_TYPE_EVENTLOGMESSAGE: EventLogMessageStage.from_settings,
}


def register_stage(stage_type: str, factory: StageFactory) -> None:
    """Register a stage factory under a type name.

    Args:
        stage_type: Name used in ``pipeline_stages`` (e.g. "eventlogmessage")
        factory: Callable building the stage from its settings mapping

    Raises:
        ValueError: If the type name is empty or already registered
    """
    if not stage_type:
        raise ValueError("stage type cannot be empty")
    if stage_type in _STAGE_FACTORIES:
        raise ValueError(f"stage type already registered: {stage_type}")
    _STAGE_FACTORIES[stage_type] = factory


def new_stage(stage_type: str, settings: Mapping[str, Any] | None = None) -> Stage:
    """Create a stage of the given type.

    Args:
        stage_type: Registered stage type name
        settings: Stage settings passed to the factory

    Returns:
        The configured stage

    Raises:
        StageConfigError: If the type is unknown or the settings are invalid
    """
    factory = _STAGE_FACTORIES.get(stage_type)
    if factory is None:
        raise StageConfigError(
            f"unknown stage type: {stage_type}. "
            f"Supported stage types: {', '.join(sorted(_STAGE_FACTORIES))}"
        )
    return factory(settings)


class PipelineConfig(BaseModel):
    """Configuration for a stage pipeline.

    Example (JSON)::

        {
            "pipeline_stages": [
                {"eventlogmessage": {"source": "Message", "drop_invalid_labels": true}}
            ],
            "buffer_size": 1
        }
    """

    pipeline_stages: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Ordered stages, each a mapping of stage type -> settings",
    )
    buffer_size: int = Field(
        default=1,
        ge=0,
        description="Capacity of the stream between stages (0 = unbounded)",
    )

    @field_validator("pipeline_stages")
    @classmethod
    def validate_pipeline_stages(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Ensure every stage item names exactly one stage type."""
        for i, item in enumerate(v):
            if len(item) != 1:
                raise ValueError(
                    f"pipeline stage {i} must have exactly one stage type, got {len(item)}"
                )
        return v

    @classmethod
    def from_file(cls, path: Path) -> "PipelineConfig":
        """Load a pipeline configuration from a JSON file.

        Args:
            path: Path to the JSON configuration

        Returns:
            Validated PipelineConfig

        Raises:
            FileNotFoundError: If the file does not exist
            json.JSONDecodeError: If the file is not valid JSON
            ValidationError: If the configuration is invalid
        """
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        return cls.model_validate(data)


class Pipeline:
    """An ordered chain of stages.

    Attributes:
        stages: Stages in processing order
        buffer_size: Capacity of the streams created by process()
    """

    def __init__(self, stages: Iterable[Stage], buffer_size: int = 1) -> None:
        self.stages = list(stages)
        self.buffer_size = buffer_size

    @classmethod
    def from_config(cls, config: PipelineConfig | Mapping[str, Any]) -> "Pipeline":
        """Build a pipeline from its configuration.

        Args:
            config: PipelineConfig or an equivalent mapping

        Returns:
            Pipeline with one stage per ``pipeline_stages`` item

        Raises:
            StageConfigError: If any stage cannot be built
            ValidationError: If a mapping config is malformed
        """
        if not isinstance(config, PipelineConfig):
            config = PipelineConfig.model_validate(config)

        stages = []
        for item in config.pipeline_stages:
            ((stage_type, settings),) = item.items()
            stages.append(new_stage(stage_type, settings))

        logger.info(
            f"Built pipeline with {len(stages)} stage(s)",
            extra={"context": {"stages": [stage.name for stage in stages]}},
        )
        return cls(stages, buffer_size=config.buffer_size)

    @property
    def size(self) -> int:
        return len(self.stages)

    def run(self, inbound: RecordStream) -> RecordStream:
        """Start every stage and return the last stage's outbound stream.

        Must be called from within a running event loop.
        """
        stream = inbound
        for stage in self.stages:
            stream = stage.run(stream)
        return stream

    async def process(self, entries: Iterable[Entry]) -> list[Entry]:
        """Run entries through the pipeline and collect the output in order.

        Args:
            entries: Entries to process

        Returns:
            Processed entries, in input order

        Raises:
            Exception: The first error raised by a stage, after the remaining
                stage tasks have been cancelled
        """
        inbound = RecordStream(maxsize=self.buffer_size)
        outbound = self.run(inbound)

        async def feed() -> None:
            try:
                for entry in entries:
                    await inbound.put(entry)
            finally:
                inbound.close()

        feeder = asyncio.create_task(feed(), name="pipeline-feeder")
        results = [entry async for entry in outbound]

        tasks = [feeder, *(stage.task for stage in self.stages if stage.task is not None)]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in pending:
            task.cancel()
        for task in tasks:
            if task in done and task.exception() is not None:
                raise task.exception()

        return results

    def process_entries(self, entries: Iterable[Entry]) -> list[Entry]:
        """Synchronous wrapper around process()."""
        return asyncio.run(self.process(entries))
