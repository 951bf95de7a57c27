"""
Format resolution - maps a file extension to the reader that handles it.

Only the extension is consulted; file content and MIME types are never
sniffed to choose a format.
"""
import os
from typing import List, Union

from .errors import UnsupportedFormatError
from .models import FormatTag

# File extension to format mapping
EXTENSION_MAP = {
    "csv": FormatTag.DELIMITED_TEXT,
    "txt": FormatTag.DELIMITED_TEXT,
    "json": FormatTag.JSON_ARRAY,
    "xlsx": FormatTag.SPREADSHEET_MODERN,
    "xls": FormatTag.SPREADSHEET_LEGACY,
    "zip": FormatTag.ARCHIVE,
}


def get_extension(file_path: Union[str, os.PathLike]) -> str:
    """Lower-cased extension without the leading dot ('' when there is none)."""
    return os.path.splitext(os.fspath(file_path))[1].lower().lstrip(".")


def resolve(file_path: Union[str, os.PathLike]) -> FormatTag:
    """
    Resolve the format of a file from its extension.

    Raises:
        UnsupportedFormatError: If the extension is missing or unknown
    """
    ext = get_extension(file_path)
    fmt = EXTENSION_MAP.get(ext)
    if fmt is None:
        raise UnsupportedFormatError(os.fspath(file_path), ext)
    return fmt


def is_supported(file_path: Union[str, os.PathLike]) -> bool:
    return get_extension(file_path) in EXTENSION_MAP


def get_supported_extensions() -> List[str]:
    return sorted(EXTENSION_MAP)
