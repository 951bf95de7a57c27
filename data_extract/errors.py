"""
Exceptions raised by data_extract.

Call-level failures (unknown format, wrong structure, missing archive
entry) abort the extraction. RowParseError is row-level: streams catch it,
log a warning and move on to the next row.
"""

from typing import Any, Dict, Optional, Union


class DataExtractError(Exception):
    """Base exception for all data_extract errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class UnsupportedFormatError(DataExtractError):
    """File extension is missing or not mapped to a reader."""

    def __init__(self, file_path: str, extension: str) -> None:
        message = "Unknown file format or bad extension"
        super().__init__(message, {"file_path": file_path, "extension": extension})
        self.file_path = file_path
        self.extension = extension


class InvalidStructureError(DataExtractError):
    """File content does not have the shape its format requires."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(reason, {"file_path": file_path})
        self.file_path = file_path


class NoEntryFoundError(DataExtractError):
    """Archive holds no entry matching the requested target."""

    def __init__(self, archive_path: str, target: Union[int, str, None]) -> None:
        message = "No valid file found in ZIP archive"
        super().__init__(message, {"archive_path": archive_path, "target": target})
        self.archive_path = archive_path
        self.target = target


class RowParseError(DataExtractError):
    """A single row could not be turned into a record."""

    pass


class StreamConsumedError(DataExtractError):
    """A record stream was iterated more than once."""

    def __init__(self) -> None:
        super().__init__("Record stream has already been consumed")
