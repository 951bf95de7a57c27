"""
data_extract - pull rows out of CSV/TXT, JSON, XLSX, XLS and ZIP files.

The format is chosen from the file extension; every reader returns the
same record shape (dicts keyed by header, or by column_<n> when
`no_headers` is set), either as a list or as a lazy stream, with optional
column selection and renaming.

Example:
    from data_extract import ExtractionOptions, UniversalExtractor

    extractor = UniversalExtractor()
    result = extractor.extract_with_details(
        "sales.csv",
        ExtractionOptions(limit=100, columns=["name", "age"], column_mapping={"name": "fullName"}),
    )
"""
from .base import BaseReader, RecordPipeline
from .csv_parser import CsvReader, DelimiterCache, detect_delimiter
from .errors import (
    DataExtractError,
    InvalidStructureError,
    NoEntryFoundError,
    RowParseError,
    StreamConsumedError,
    UnsupportedFormatError,
)
from .excel_parser import XlsReader, XlsxReader
from .filters import project, projection_stage
from .formats import get_supported_extensions, is_supported, resolve
from .json_parser import JsonReader
from .main_parser import UniversalExtractor, extract, extract_as_stream, extract_with_details
from .models import ExtractionOptions, ExtractionResult, FormatTag, Record
from .stream import RecordStream, Stage, StreamHandle
from .zip_parser import ZipReader

__all__ = [
    "UniversalExtractor",
    "extract",
    "extract_with_details",
    "extract_as_stream",
    "ExtractionOptions",
    "ExtractionResult",
    "FormatTag",
    "Record",
    "RecordStream",
    "Stage",
    "StreamHandle",
    "resolve",
    "is_supported",
    "get_supported_extensions",
    "project",
    "projection_stage",
    "BaseReader",
    "RecordPipeline",
    "CsvReader",
    "DelimiterCache",
    "detect_delimiter",
    "JsonReader",
    "XlsxReader",
    "XlsReader",
    "ZipReader",
    "DataExtractError",
    "UnsupportedFormatError",
    "InvalidStructureError",
    "NoEntryFoundError",
    "RowParseError",
    "StreamConsumedError",
]
