"""
Base Reader Interface.

Every file format has one reader implementing stream(); read() is the
materialized form of the same stream unless a reader has a reason to
decode differently.
"""
from abc import ABC, abstractmethod
from typing import List, Protocol

from .models import ExtractionOptions, FormatTag, Record
from .stream import StreamHandle


class BaseReader(ABC):
    """
    Abstract base class for format readers.

    Readers return records that are already normalized (keyed by header or
    by column_<n>) but not projected; projection belongs to the orchestrator.
    """

    format_tag: FormatTag

    def __init__(self, format_name: str):
        """
        Args:
            format_name: Human-readable format name (e.g. 'CSV', 'XLSX')
        """
        self.format_name = format_name

    @abstractmethod
    def stream(self, file_path: str, options: ExtractionOptions) -> StreamHandle:
        """
        Open the file as a lazy stream of records.

        Args:
            file_path: Path of the file to read
            options: Extraction options

        Returns:
            StreamHandle whose pending stages and limit are not yet applied
        """

    def read(self, file_path: str, options: ExtractionOptions) -> List[Record]:
        """
        Read every record of the file (up to options.limit), in source order.
        """
        with self.stream(file_path, options) as handle:
            return list(handle)


class RecordPipeline(Protocol):
    """
    Resolve -> read pipeline of the orchestrator, without projection.

    Readers that hand work back to the orchestrator (the archive reader)
    depend on this interface instead of the orchestrator class.
    """

    def read_records(self, file_path: str, options: ExtractionOptions) -> List[Record]:
        ...

    def stream_records(self, file_path: str, options: ExtractionOptions) -> StreamHandle:
        ...
