"""
logpipe - event log message extraction for log pipelines.

This package provides the stage pipeline and the event log message stage
that turns semi-structured ``Key: Value`` message text into extracted fields.

Main components:
- cli: Command-line interface
- parsers: Label sanitization and message text parsers
- core: Merging parsed fields into entries
- stages: Stage contract, record streams, pipeline runner and stages
- schemas: Data models for pipeline entries
- utils: Utilities (logging, etc.)

Public API (for use as a library):
"""

from logpipe.core import merge_fields
from logpipe.parsers import BaseParser, EventLogParser, ParsedField, parse, sanitize
from logpipe.schemas import Entry, lookup_text
from logpipe.stages import (
    EventLogMessageConfig,
    EventLogMessageStage,
    Pipeline,
    PipelineConfig,
    RecordStream,
    Stage,
    StageConfigError,
    new_stage,
    register_stage,
)

__version__ = "0.1.0"

__all__ = [
    # Schemas
    "Entry",
    "lookup_text",
    # Parsers
    "BaseParser",
    "EventLogParser",
    "ParsedField",
    "parse",
    "sanitize",
    # Core
    "merge_fields",
    # Stages
    "Stage",
    "RecordStream",
    "StageConfigError",
    "Pipeline",
    "PipelineConfig",
    "new_stage",
    "register_stage",
    "EventLogMessageConfig",
    "EventLogMessageStage",
]
