"""Stage contract and record streams for logpipe pipelines."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from logpipe.schemas import Entry
from logpipe.utils.logger import get_logger

logger = get_logger(__name__)

_CLOSED = object()


class StageError(Exception):
    """Base exception for stage-related errors."""
    pass


class StageConfigError(StageError, ValueError):
    """Exception raised when a stage cannot be built from its settings."""
    pass


class StreamClosedError(StageError, RuntimeError):
    """Exception raised when writing to a closed record stream."""
    pass


class RecordStream:
    """A closable, optionally bounded FIFO of entries between two stages.

    Exactly one producer writes with put() and ends the stream with close();
    exactly one consumer reads it with ``async for``. Iteration stops once
    every entry put before close() has been read.

    Attributes:
        maxsize: Capacity of the stream; 0 means unbounded
    """

    def __init__(self, maxsize: int = 1) -> None:
        """Initialize the stream.

        Args:
            maxsize: Maximum number of buffered entries (0 = unbounded).
                A full stream blocks put() until the consumer catches up.
        """
        self.maxsize = maxsize
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._closed = False
        self._drained = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def put(self, entry: Entry) -> None:
        """Write an entry, waiting while the stream is full.

        Raises:
            StreamClosedError: If close() was already called
        """
        if self._closed:
            raise StreamClosedError("cannot write to a closed record stream")
        await self._queue.put(entry)

    def close(self) -> None:
        """Signal that no more entries will be written. Idempotent, never blocks."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            # A full stream has no waiting reader; __anext__ stops once it is empty
            pass

    def __aiter__(self) -> "RecordStream":
        return self

    async def __anext__(self) -> Entry:
        if self._drained or (self._closed and self._queue.empty()):
            self._drained = True
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._drained = True
            raise StopAsyncIteration
        return item


class Stage(ABC):
    """Abstract base class for pipeline stages.

    A stage consumes an inbound stream of entries and produces an outbound
    stream. The default run() starts a single worker task that handles one
    entry at a time, in arrival order, and closes the outbound stream once
    the inbound stream is exhausted.

    Subclasses implement process() to enrich an entry in place. They must not
    keep a reference to the entry after process() returns.
    """

    def __init__(self) -> None:
        self._task: asyncio.Task[None] | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Stage type name (e.g. "eventlogmessage")."""
        pass

    @abstractmethod
    def process(self, entry: Entry) -> None:
        """Transform a single entry in place.

        Args:
            entry: The entry to enrich
        """
        pass

    @property
    def task(self) -> asyncio.Task[None] | None:
        """The worker task started by run(), if any."""
        return self._task

    def run(self, inbound: RecordStream) -> RecordStream:
        """Start processing ``inbound`` and return the outbound stream.

        Must be called from within a running event loop. The outbound stream
        has the same capacity as the inbound one and is closed exactly once,
        after the inbound stream has been drained.

        Args:
            inbound: Stream to read entries from

        Returns:
            Stream the processed entries are written to

        Raises:
            RuntimeError: If this stage is already running
        """
        if self._task is not None and not self._task.done():
            raise RuntimeError(f"stage {self.name} is already running")

        outbound = RecordStream(maxsize=inbound.maxsize)
        self._task = asyncio.get_running_loop().create_task(
            self._work(inbound, outbound), name=f"stage-{self.name}"
        )
        return outbound

    async def _work(self, inbound: RecordStream, outbound: RecordStream) -> None:
        """Worker loop: process entries until the inbound stream is closed."""
        try:
            async for entry in inbound:
                self.process(entry)
                await outbound.put(entry)
        except Exception:
            logger.error(
                f"Stage {self.name} failed",
                exc_info=True,
                extra={"context": {"stage": self.name}},
            )
            raise
        finally:
            outbound.close()
