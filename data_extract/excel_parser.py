"""
Spreadsheet readers (.xlsx, .xls).

Only the first worksheet of a workbook is read. Cell values keep the type
the decoder gives them (numbers, dates, booleans, strings). Both readers
key rows the same way: fully empty rows are ignored, the first remaining
row is the header, and a repeated header name keeps the later column.
"""
import os
from typing import Any, Iterable, Iterator, List, Optional, Sequence

import openpyxl
import pandas as pd

from .base import BaseReader
from .logging_config import get_logger
from .models import ExtractionOptions, FormatTag, Record
from .stream import RecordStream, StreamHandle
from .utils import (
    convert_numpy_types,
    header_names,
    is_missing,
    positional_record,
    trim_trailing_missing,
)

logger = get_logger(__name__)


def _is_empty_row(values: Sequence[Any]) -> bool:
    return all(is_missing(value) or value == "" for value in values)


def _header_record(header: List[str], values: Sequence[Any]) -> Record:
    record: Record = {}
    for index, name in enumerate(header):
        record[name] = values[index] if index < len(values) else None
    return record


def _sheet_records(rows: Iterable[Sequence[Any]], options: ExtractionOptions) -> Iterator[Record]:
    header: Optional[List[str]] = None
    for values in rows:
        if _is_empty_row(values):
            continue
        if options.no_headers:
            yield positional_record(trim_trailing_missing(values))
        elif header is None:
            header = header_names(trim_trailing_missing(values))
        else:
            yield _header_record(header, values)


class XlsxReader(BaseReader):
    """
    Reader for .xlsx workbooks.

    Rows are pulled from openpyxl in read-only mode, so only the rows that
    are consumed get decoded; stopping early closes the workbook.
    """

    format_tag = FormatTag.SPREADSHEET_MODERN

    def __init__(self):
        super().__init__("XLSX")

    def stream(self, file_path: str, options: ExtractionOptions) -> StreamHandle:
        # Open now so a missing or corrupt file fails the call, not the first read
        workbook = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
        source = RecordStream(
            self._iter_rows(workbook, file_path, options),
            on_close=workbook.close,
        )
        return StreamHandle(
            source=source,
            format=self.format_tag,
            limit=options.limit,
        )

    def _iter_rows(self, workbook, file_path: str, options: ExtractionOptions) -> Iterator[Record]:
        if not workbook.worksheets:
            return
        sheet = workbook.worksheets[0]
        if len(workbook.worksheets) > 1:
            logger.debug(
                f"{os.path.basename(file_path)} has {len(workbook.worksheets)} sheets, "
                f"reading '{sheet.title}' only"
            )

        yield from _sheet_records(sheet.iter_rows(values_only=True), options)


class XlsReader(BaseReader):
    """
    Reader for legacy .xls workbooks.

    xlrd decodes the whole sheet at once, so there is no early stop: the
    sheet is read completely and then truncated to the row-limit.
    """

    format_tag = FormatTag.SPREADSHEET_LEGACY

    def __init__(self):
        super().__init__("XLS")

    def read(self, file_path: str, options: ExtractionOptions) -> List[Record]:
        # Header handling stays ours so both spreadsheet formats name columns alike
        df = pd.read_excel(file_path, sheet_name=0, header=None, engine="xlrd")

        rows = (convert_numpy_types(values) for values in df.itertuples(index=False, name=None))
        records = list(_sheet_records(rows, options))

        logger.debug(f"Decoded {len(records)} rows from {os.path.basename(file_path)}")

        if options.limit is not None:
            return records[:options.limit]
        return records

    def stream(self, file_path: str, options: ExtractionOptions) -> StreamHandle:
        records = self.read(file_path, options)
        return StreamHandle(source=RecordStream(iter(records)), format=self.format_tag)
