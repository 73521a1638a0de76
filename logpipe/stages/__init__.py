"""
Pipeline stages for logpipe.

This module exposes the stage contract, record streams, the pipeline
runner and the built-in stage implementations.
"""

from .base import (
    RecordStream,
    Stage,
    StageConfigError,
    StageError,
    StreamClosedError,
)
from .eventlogmessage import (
    STAGE_TYPE_EVENTLOGMESSAGE,
    EventLogMessageConfig,
    EventLogMessageStage,
)
from .pipeline import Pipeline, PipelineConfig, new_stage, register_stage

__all__ = [
    # Contract
    "Stage",
    "RecordStream",
    "StageError",
    "StageConfigError",
    "StreamClosedError",
    # Pipeline
    "Pipeline",
    "PipelineConfig",
    "new_stage",
    "register_stage",
    # Stages
    "STAGE_TYPE_EVENTLOGMESSAGE",
    "EventLogMessageConfig",
    "EventLogMessageStage",
]
