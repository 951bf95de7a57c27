"""
Delimited text reader (.csv, .txt).

Tokenizing is done by pandas in chunks, so large files are never loaded
whole. Every value is kept as the string found in the file.
"""
import csv
import os
import threading
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from . import config
from .base import BaseReader
from .logging_config import get_logger
from .models import ExtractionOptions, FormatTag, Record
from .stream import RecordStream, StreamHandle
from .utils import header_names, is_missing, positional_record, text_encoding, trim_trailing_missing

logger = get_logger(__name__)

DEFAULT_DELIMITER = ","


class DelimiterCache:
    """Thread-safe memo of detected delimiters, keyed by absolute file path."""

    def __init__(self):
        self._lock = threading.Lock()
        self._delimiters: Dict[str, str] = {}

    @staticmethod
    def _key(file_path: str) -> str:
        return os.path.abspath(file_path)

    def get(self, file_path: str) -> Optional[str]:
        with self._lock:
            return self._delimiters.get(self._key(file_path))

    def set(self, file_path: str, delimiter: str) -> None:
        with self._lock:
            self._delimiters[self._key(file_path)] = delimiter

    def clear(self) -> None:
        with self._lock:
            self._delimiters.clear()

    def __contains__(self, file_path: str) -> bool:
        with self._lock:
            return self._key(file_path) in self._delimiters

    def __len__(self) -> int:
        with self._lock:
            return len(self._delimiters)


def detect_delimiter(
    file_path: str,
    encoding: str = config.DEFAULT_ENCODING,
    sample_size: int = config.SNIFF_SAMPLE_BYTES,
) -> Optional[str]:
    """
    Guess the delimiter of a text file from its first characters.

    Args:
        file_path: Path to the file
        encoding: Text encoding of the file
        sample_size: Number of characters to sniff

    Returns:
        The detected delimiter, or None when no candidate fits
    """
    with open(file_path, "r", encoding=text_encoding(encoding), errors="replace", newline="") as f:
        sample = f.read(sample_size)

    if not sample.strip():
        return None

    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=config.CANDIDATE_DELIMITERS)
    except csv.Error:
        return None

    logger.debug(f"CSV delimiter detected: {dialect.delimiter!r} ({os.path.basename(file_path)})")
    return dialect.delimiter


def _to_positional_record(values: List[Any]) -> Record:
    return positional_record(values, strip=True)


class CsvReader(BaseReader):
    """Reader for delimited text files."""

    format_tag = FormatTag.DELIMITED_TEXT

    def __init__(self, delimiter_cache: Optional[DelimiterCache] = None):
        super().__init__("CSV")
        self.delimiter_cache = delimiter_cache if delimiter_cache is not None else DelimiterCache()

    def detected_delimiter(self, file_path: str, encoding: str = config.DEFAULT_ENCODING) -> Optional[str]:
        """Detected delimiter for the file, sniffing it at most once per path."""
        cached = self.delimiter_cache.get(file_path)
        if cached is not None:
            return cached

        delimiter = detect_delimiter(file_path, encoding)
        if delimiter is not None:
            self.delimiter_cache.set(file_path, delimiter)
        return delimiter

    def resolve_delimiter(self, file_path: str, options: ExtractionOptions) -> str:
        """Explicit option, then detection, then comma."""
        return (
            options.delimiter
            or self.detected_delimiter(file_path, options.encoding)
            or DEFAULT_DELIMITER
        )

    def stream(self, file_path: str, options: ExtractionOptions) -> StreamHandle:
        delimiter = self.resolve_delimiter(file_path, options)
        source = RecordStream(self._iter_rows(file_path, options, delimiter))

        # Positional mode yields raw field lists, keyed by a pending stage
        stages = [_to_positional_record] if options.no_headers else []

        return StreamHandle(
            source=source,
            format=self.format_tag,
            stages=stages,
            delimiter=options.delimiter or self.delimiter_cache.get(file_path),
            limit=options.limit,
        )

    def _iter_rows(self, file_path: str, options: ExtractionOptions, delimiter: str) -> Iterator[Any]:
        header: Optional[List[str]] = None
        for values in self._iter_fields(file_path, options, delimiter):
            if options.no_headers:
                yield trim_trailing_missing(values)
            elif header is None:
                header = header_names(values)
            else:
                # Short rows are padded with None; keep only fields present
                yield {key: value for key, value in zip(header, values) if not is_missing(value)}

    def _iter_fields(self, file_path: str, options: ExtractionOptions, delimiter: str) -> Iterator[tuple]:
        """
        Tokenized rows of the file, header line included.

        A parse error ends the rows. The file is then read again one row at
        a time, past the rows already produced, so the rows before the
        failure in the same chunk are not lost.
        """
        name = os.path.basename(file_path)
        produced = 0
        remaining_skip = 0
        chunk_size = config.CSV_CHUNK_SIZE

        def _skip_bad_line(bad_line: List[str]) -> None:
            # Rows before the resume point were already reported
            if not remaining_skip:
                logger.warning(f"Skipped malformed row in {name}: {len(bad_line)} fields")
            return None

        while True:
            remaining_skip = produced
            try:
                # header=None keeps pandas from turning a wide first row into an index
                reader = pd.read_csv(
                    file_path,
                    sep=delimiter,
                    header=None,
                    dtype=object,
                    na_filter=False,
                    keep_default_na=False,
                    skip_blank_lines=True,
                    quotechar='"',
                    encoding=text_encoding(options.encoding),
                    engine="python",
                    on_bad_lines=_skip_bad_line,
                    chunksize=chunk_size,
                )
                with reader:
                    for chunk in reader:
                        for values in chunk.itertuples(index=False, name=None):
                            if remaining_skip:
                                remaining_skip -= 1
                                continue
                            produced += 1
                            yield values
                return
            except pd.errors.EmptyDataError:
                logger.info(f"No data in {name}")
                return
            except (csv.Error, pd.errors.ParserError) as e:
                if chunk_size == 1:
                    logger.warning(f"Skipped remaining rows of {name} after parse error: {e}")
                    return
                logger.debug(f"Parse error in {name}, re-reading row by row: {e}")
                chunk_size = 1
