"""
Universal extractor - routes files to the reader for their format.

    from data_extract import extract, ExtractionOptions

    rows = extract("people.csv", ExtractionOptions(limit=10, columns=["name"]))
"""
import os
from typing import Dict, List, Optional, Union

from .base import BaseReader
from .csv_parser import CsvReader, DelimiterCache
from .excel_parser import XlsReader, XlsxReader
from .filters import project, projection_stage
from .formats import get_supported_extensions, resolve
from .json_parser import JsonReader
from .logging_config import get_logger
from .models import ExtractionOptions, ExtractionResult, FormatTag, Record
from .stream import StreamHandle
from .zip_parser import ZipReader

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]


class UniversalExtractor:
    """
    Extracts rows from CSV/TXT, JSON, XLSX, XLS and ZIP files.

    An instance keeps a cache of detected CSV delimiters; use one instance
    per group of related calls, or call clear_cache() when files change.
    """

    def __init__(self, temp_dir: Optional[str] = None):
        """
        Args:
            temp_dir: Directory used to extract ZIP entries (config.TEMP_DIR by default)
        """
        self._delimiter_cache = DelimiterCache()
        self._csv_reader = CsvReader(self._delimiter_cache)
        self._readers: Dict[FormatTag, BaseReader] = {
            FormatTag.DELIMITED_TEXT: self._csv_reader,
            FormatTag.JSON_ARRAY: JsonReader(),
            FormatTag.SPREADSHEET_MODERN: XlsxReader(),
            FormatTag.SPREADSHEET_LEGACY: XlsReader(),
            FormatTag.ARCHIVE: ZipReader(self, temp_dir=temp_dir),
        }

    def get_reader(self, fmt: FormatTag) -> BaseReader:
        return self._readers[fmt]

    # Resolve -> read, without projection. The ZIP reader calls back into these.

    def read_records(self, file_path: PathLike, options: ExtractionOptions) -> List[Record]:
        file_path = os.fspath(file_path)
        fmt = resolve(file_path)
        logger.debug(f"Reading {os.path.basename(file_path)} as {fmt.value}")
        return self._readers[fmt].read(file_path, options)

    def stream_records(self, file_path: PathLike, options: ExtractionOptions) -> StreamHandle:
        file_path = os.fspath(file_path)
        fmt = resolve(file_path)
        logger.debug(f"Streaming {os.path.basename(file_path)} as {fmt.value}")
        return self._readers[fmt].stream(file_path, options)

    def extract(self, file_path: PathLike, options: Optional[ExtractionOptions] = None) -> List[Record]:
        """
        Extract all records from a file.

        Args:
            file_path: Path to the file; the format comes from its extension
            options: Extraction options (defaults when omitted)

        Returns:
            List of records in source order

        Raises:
            UnsupportedFormatError: If the extension is missing or unknown
            InvalidStructureError: If the content does not fit its format
            NoEntryFoundError: If a ZIP archive has no matching entry
        """
        options = options or ExtractionOptions()
        records = self.read_records(file_path, options)

        if options.has_projection:
            records = [project(record, options) for record in records]

        logger.info(f"Extracted {len(records)} records from {os.path.basename(os.fspath(file_path))}")
        return records

    def extract_with_details(
        self, file_path: PathLike, options: Optional[ExtractionOptions] = None
    ) -> ExtractionResult:
        """Extract records along with the detected format and delimiter."""
        options = options or ExtractionOptions()
        file_path = os.fspath(file_path)
        fmt = resolve(file_path)

        records = self.extract(file_path, options)
        result = ExtractionResult(records=records, format=fmt)

        if fmt is FormatTag.DELIMITED_TEXT:
            result.delimiter = self._reported_delimiter(file_path, options)

        return result

    def extract_as_stream(
        self, file_path: PathLike, options: Optional[ExtractionOptions] = None
    ) -> StreamHandle:
        """
        Open a file as a lazy stream of records.

        The returned handle is single-pass; iterate it, or use it as a context
        manager so resources are released if it is abandoned early.
        """
        options = options or ExtractionOptions()
        file_path = os.fspath(file_path)
        handle = self.stream_records(file_path, options)

        if handle.format is FormatTag.DELIMITED_TEXT:
            handle.delimiter = self._reported_delimiter(file_path, options)

        stage = projection_stage(options)
        if stage is not None:
            handle.add_stage(stage)

        return handle

    def _reported_delimiter(self, file_path: str, options: ExtractionOptions) -> Optional[str]:
        return options.delimiter or self._csv_reader.detected_delimiter(file_path, options.encoding)

    def clear_cache(self) -> None:
        """Forget every detected delimiter."""
        self._delimiter_cache.clear()

    @staticmethod
    def get_supported_extensions() -> List[str]:
        return get_supported_extensions()


# Convenience functions

def extract(file_path: PathLike, options: Optional[ExtractionOptions] = None) -> List[Record]:
    return UniversalExtractor().extract(file_path, options)


def extract_with_details(
    file_path: PathLike, options: Optional[ExtractionOptions] = None
) -> ExtractionResult:
    return UniversalExtractor().extract_with_details(file_path, options)


def extract_as_stream(
    file_path: PathLike, options: Optional[ExtractionOptions] = None
) -> StreamHandle:
    return UniversalExtractor().extract_as_stream(file_path, options)
