"""
JSON reader (.json).

The whole document is parsed up front; streaming only hands the parsed
array out one element at a time. Files that do not fit in memory are
therefore not supported by this reader.
"""
import json
import os
from typing import Any, List

from .base import BaseReader
from .errors import InvalidStructureError, RowParseError
from .logging_config import get_logger
from .models import ExtractionOptions, FormatTag, Record
from .stream import RecordStream, StreamHandle
from .utils import positional_record, text_encoding

logger = get_logger(__name__)


def _object_record(entry: Any) -> Record:
    if not isinstance(entry, dict):
        raise RowParseError(f"Expected a JSON object, got {type(entry).__name__}")
    return dict(entry)


def _positional_record(entry: Any) -> Record:
    if isinstance(entry, dict):
        return positional_record(entry.values())
    if isinstance(entry, list):
        return positional_record(entry)
    raise RowParseError(f"Expected a JSON object or array, got {type(entry).__name__}")


class JsonReader(BaseReader):
    """Reader for JSON files holding a top-level array of objects."""

    format_tag = FormatTag.JSON_ARRAY

    def __init__(self):
        super().__init__("JSON")

    def load(self, file_path: str, encoding: str) -> List[Any]:
        """
        Parse the file and return its top-level array.

        Raises:
            InvalidStructureError: If the file is not valid JSON or not an array
        """
        with open(file_path, "r", encoding=text_encoding(encoding)) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise InvalidStructureError(file_path, f"Invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise InvalidStructureError(
                file_path,
                f"JSON file must contain a top-level array, got {type(data).__name__}",
            )

        logger.debug(f"Parsed {len(data)} JSON entries from {os.path.basename(file_path)}")
        return data

    def stream(self, file_path: str, options: ExtractionOptions) -> StreamHandle:
        data = self.load(file_path, options.encoding)
        stage = _positional_record if options.no_headers else _object_record

        return StreamHandle(
            source=RecordStream(iter(data)),
            format=self.format_tag,
            stages=[stage],
            limit=options.limit,
        )
