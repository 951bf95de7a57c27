"""
Data model shared by the readers and the orchestrator.
"""
import json
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from . import config

# One normalized row: column name (or column_<n>) -> scalar value
Record = Dict[str, Any]


class FormatTag(str, Enum):
    """Logical file format, derived from the file extension only."""

    DELIMITED_TEXT = "delimited-text"
    JSON_ARRAY = "json-array"
    SPREADSHEET_MODERN = "spreadsheet-modern"
    SPREADSHEET_LEGACY = "spreadsheet-legacy"
    ARCHIVE = "archive"


@dataclass(frozen=True)
class ExtractionOptions:
    """
    Configuration for one extraction call.

    Attributes:
        limit: Maximum number of records to return
        no_headers: Treat the first row as data and name columns column_1..column_n
        delimiter: Explicit delimiter for delimited text (detected when omitted)
        encoding: Text encoding for delimited text and JSON
        archive_target: ZIP entry to extract, by index or name substring
        columns: Columns to keep (all columns when omitted)
        column_mapping: Column renames {old_name: new_name}, applied after `columns`
    """

    limit: Optional[int] = None
    no_headers: bool = False
    delimiter: Optional[str] = None
    encoding: str = config.DEFAULT_ENCODING
    archive_target: Union[int, str, None] = None
    columns: Optional[Tuple[str, ...]] = None
    column_mapping: Optional[Mapping[str, str]] = None

    def __post_init__(self):
        if self.limit is not None:
            if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit < 1:
                raise ValueError(f"limit must be a positive integer, got {self.limit!r}")
        if self.delimiter is not None and not self.delimiter:
            raise ValueError("delimiter must not be empty")
        if isinstance(self.archive_target, bool):
            raise ValueError("archive_target must be an index or a name")
        if self.columns is not None:
            object.__setattr__(self, "columns", tuple(self.columns))
        if self.column_mapping is not None:
            object.__setattr__(self, "column_mapping", MappingProxyType(dict(self.column_mapping)))

    @property
    def has_projection(self) -> bool:
        return self.columns is not None or self.column_mapping is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExtractionOptions":
        """
        Build options from loosely typed input such as HTTP form fields.

        `columns` may be a list or a comma-separated string, `column_mapping`
        a mapping or a JSON object string, `archive_target` a digit string is
        read as an index.
        """
        def _blank(value):
            return value is None or (isinstance(value, str) and not value.strip())

        kwargs: Dict[str, Any] = {}

        if not _blank(data.get("limit")):
            kwargs["limit"] = int(data["limit"])

        no_headers = data.get("no_headers")
        if isinstance(no_headers, str):
            kwargs["no_headers"] = no_headers.strip().lower() in ("1", "true", "yes", "on")
        elif no_headers is not None:
            kwargs["no_headers"] = bool(no_headers)

        if not _blank(data.get("delimiter")):
            kwargs["delimiter"] = data["delimiter"]
        if not _blank(data.get("encoding")):
            kwargs["encoding"] = data["encoding"]

        target = data.get("archive_target")
        if not _blank(target):
            if isinstance(target, str) and target.strip().isdigit():
                target = int(target)
            kwargs["archive_target"] = target

        columns = data.get("columns")
        if not _blank(columns):
            if isinstance(columns, str):
                columns = [c.strip() for c in columns.split(",") if c.strip()]
            kwargs["columns"] = columns

        mapping = data.get("column_mapping")
        if not _blank(mapping):
            if isinstance(mapping, str):
                mapping = json.loads(mapping)
            if not isinstance(mapping, dict):
                raise ValueError("column_mapping must be an object of old_name -> new_name")
            kwargs["column_mapping"] = mapping

        return cls(**kwargs)


@dataclass
class ExtractionResult:
    """Records of a batch extraction plus what was learned about the file."""

    records: List[Record]
    format: FormatTag
    delimiter: Optional[str] = None  # Delimited text only

    @property
    def row_count(self) -> int:
        return len(self.records)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": self.records,
            "format": self.format.value,
            "row_count": self.row_count,
            "delimiter": self.delimiter,
        }
