"""
Event log message stage.

Extracts ``Key: Value`` fields from a Windows event log message held in an
entry's extracted mapping and merges them back into that mapping.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from logpipe.core.merger import merge_fields
from logpipe.parsers import EventLogParser, is_valid_label_name
from logpipe.parsers.eventlog_parser import LINE_SEPARATOR
from logpipe.schemas import Entry, lookup_text
from logpipe.stages.base import Stage, StageConfigError
from logpipe.utils.logger import get_logger

logger = get_logger(__name__)

STAGE_TYPE_EVENTLOGMESSAGE = "eventlogmessage"
DEFAULT_SOURCE = "message"
DESCRIPTION_LABEL = "Description"


class EventLogMessageConfig(BaseModel):
    """Configuration for the event log message stage.

    Unknown settings are ignored.
    """

    source: StrictStr | None = Field(
        default=None,
        description=f"Extracted value holding the message (default: {DEFAULT_SOURCE!r})",
    )
    overwrite_existing: bool = Field(
        default=False,
        description="Replace existing extracted values instead of adding '<name>_extracted'",
    )
    drop_invalid_labels: bool = Field(
        default=False,
        description="Discard all fields of a message if any key is not a valid label name",
    )
    first_line_only: bool = Field(
        default=False,
        description="Only extract the first line of the message as 'Description'",
    )

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str | None) -> str | None:
        """Ensure an explicitly configured source is a valid label name."""
        if v is not None and not is_valid_label_name(v):
            raise ValueError(f"invalid label name: {v}")
        return v

    @property
    def source_key(self) -> str:
        return self.source if self.source is not None else DEFAULT_SOURCE


class EventLogMessageStage(Stage):
    """Stage that turns event log message text into extracted values.

    Entries are always forwarded. An entry whose source value is missing or
    not text passes through unchanged.
    """

    def __init__(self, config: EventLogMessageConfig | None = None) -> None:
        super().__init__()
        self.config = config or EventLogMessageConfig()
        self.parser = EventLogParser()

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any] | None) -> "EventLogMessageStage":
        """Build the stage from generic settings.

        Args:
            settings: Stage settings, e.g. ``{"source": "Message"}``. None is
                treated as an empty mapping.

        Returns:
            Configured stage

        Raises:
            StageConfigError: If the settings are invalid
        """
        if settings is None:
            settings = {}
        if not isinstance(settings, Mapping):
            raise StageConfigError(
                f"{STAGE_TYPE_EVENTLOGMESSAGE} stage config must be a mapping, "
                f"got {type(settings).__name__}"
            )

        try:
            config = EventLogMessageConfig.model_validate(dict(settings))
        except ValidationError as e:
            for err in e.errors():
                if err["loc"] == ("source",) and err["type"] == "value_error":
                    # Rejected label name: report it as is
                    raise StageConfigError(str(err["ctx"]["error"])) from e
            details = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise StageConfigError(
                f"invalid {STAGE_TYPE_EVENTLOGMESSAGE} stage config: {details}"
            ) from e

        logger.debug(
            "Created event log message stage",
            extra={"context": config.model_dump()},
        )
        return cls(config)

    @property
    def name(self) -> str:
        return STAGE_TYPE_EVENTLOGMESSAGE

    def process(self, entry: Entry) -> None:
        """Extract fields from the entry's source value into ``entry.extracted``."""
        source = self.config.source_key
        lookup = lookup_text(entry.extracted, source)
        if not lookup.found:
            logger.debug(
                "Source value is not usable as message text",
                extra={
                    "context": {
                        "source": source,
                        "status": lookup.status.value,
                        "type": lookup.value_type,
                    }
                },
            )
            return

        text = lookup.text or ""

        if self.config.first_line_only:
            first_line, _, _ = text.partition(LINE_SEPARATOR)
            entry.extracted[DESCRIPTION_LABEL] = first_line
            return

        merged = merge_fields(
            self.parser.parse(text),
            entry.extracted,
            overwrite=self.config.overwrite_existing,
            drop_invalid=self.config.drop_invalid_labels,
        )
        if not merged:
            return

        entry.extracted.update(merged)
