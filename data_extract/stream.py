"""
Lazy record streams.

A RecordStream is a single-pass, forward-only sequence of records. Row
transforms are attached with compose() and a row-limit with limit(); each
returns a new stream chained to its parent. Closing any stream in a chain
closes everything upstream of it, so generator sources run their
`finally` blocks (open workbooks, temporary files) as soon as the consumer
stops, whether it reached the end, hit the limit or gave up early.
"""
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional

from .errors import RowParseError, StreamConsumedError
from .logging_config import get_logger
from .models import FormatTag, Record

logger = get_logger(__name__)

# A row transform: returns a new record, or None to drop the row
Stage = Callable[[Record], Optional[Record]]


class RecordStream:
    """Single-pass iterable of records with composable transform stages."""

    def __init__(self, source: Iterable[Record], on_close: Optional[Callable[[], None]] = None):
        self._source = source
        self._close_callbacks: List[Callable[[], None]] = [on_close] if on_close else []
        self._consumed = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Record]:
        if self._consumed:
            raise StreamConsumedError()
        self._consumed = True
        return self._iterate()

    def _iterate(self) -> Iterator[Record]:
        try:
            yield from self._source
        finally:
            self.close()

    def compose(self, stage: Stage) -> "RecordStream":
        """Return a stream yielding stage(record) for every record of this one."""
        return RecordStream(_apply_stage(self, stage), on_close=self.close)

    def limit(self, count: int) -> "RecordStream":
        """Return a stream that stops after `count` records without reading further."""
        return RecordStream(_take(self, count), on_close=self.close)

    def on_close(self, callback: Callable[[], None]) -> None:
        """Register a callback fired once when the stream closes."""
        if self._closed:
            callback()
        else:
            self._close_callbacks.append(callback)

    def close(self) -> None:
        """Release the source and fire close callbacks. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True

        close_source = getattr(self._source, "close", None)
        if close_source is not None:
            close_source()

        callbacks, self._close_callbacks = self._close_callbacks, []
        for callback in callbacks:
            callback()

    def __enter__(self) -> "RecordStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _apply_stage(records: Iterable[Record], stage: Stage) -> Iterator[Record]:
    for record in records:
        try:
            result = stage(record)
        except RowParseError as e:
            logger.warning(f"Skipped row: {e}")
            continue
        if result is not None:
            yield result


def _take(records: Iterable[Record], count: int) -> Iterator[Record]:
    if count <= 0:
        return
    taken = 0
    for record in records:
        yield record
        taken += 1
        if taken >= count:
            return


@dataclass
class StreamHandle:
    """
    Result of a streamed extraction.

    `source` produces records lazily; `stages` are pending transforms that
    records() composes onto it, in order, before the row-limit is applied.
    Iterate the handle (or the stream returned by records()) to consume it.
    """

    source: RecordStream
    format: FormatTag
    stages: List[Stage] = field(default_factory=list)
    delimiter: Optional[str] = None
    limit: Optional[int] = None
    _records: Optional[RecordStream] = field(default=None, init=False, repr=False)

    def add_stage(self, stage: Stage) -> None:
        if self._records is not None:
            raise StreamConsumedError()
        self.stages.append(stage)

    def records(self) -> RecordStream:
        """Compose the pending stages and the row-limit onto the source."""
        if self._records is None:
            stream = self.source
            for stage in self.stages:
                stream = stream.compose(stage)
            if self.limit is not None:
                stream = stream.limit(self.limit)
            self._records = stream
        return self._records

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records())

    def close(self) -> None:
        if self._records is not None:
            self._records.close()
        else:
            self.source.close()

    def __enter__(self) -> "StreamHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
