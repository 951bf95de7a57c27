import datetime
import os

import numpy as np
import openpyxl
import pandas as pd
import pytest

from data_extract import ExtractionOptions, XlsReader, XlsxReader
from data_extract import excel_parser

LEGACY_XLS = os.path.join(os.path.dirname(__file__), "data", "people.xls")


@pytest.fixture
def track_workbook_close(monkeypatch):
    """Record every close() of workbooks opened by the XLSX reader."""
    closed = []
    real_load = openpyxl.load_workbook

    def loading(*args, **kwargs):
        workbook = real_load(*args, **kwargs)
        real_close = workbook.close

        def close():
            closed.append(True)
            real_close()

        workbook.close = close
        return workbook

    monkeypatch.setattr(excel_parser.openpyxl, "load_workbook", loading)
    return closed


def test_xlsx_header_records(sample_xlsx):
    records = XlsxReader().read(sample_xlsx, ExtractionOptions())
    assert records == [
        {"name": "Alice", "age": 30, "city": "Paris"},
        {"name": "Bob", "age": 25, "city": "London"},
        {"name": "Charlie", "age": 35, "city": "Berlin"},
    ]


def test_xlsx_positional_records(sample_xlsx):
    records = XlsxReader().read(sample_xlsx, ExtractionOptions(no_headers=True))
    assert len(records) == 4
    assert records[0] == {"column_1": "name", "column_2": "age", "column_3": "city"}
    assert records[3] == {"column_1": "Charlie", "column_2": 35, "column_3": "Berlin"}


def test_xlsx_reads_first_sheet_only(sample_xlsx):
    records = XlsxReader().read(sample_xlsx, ExtractionOptions())
    assert all("id" not in record for record in records)


def test_xlsx_missing_cells_and_empty_rows(tmp_path):
    path = tmp_path / "gaps.xlsx"
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(["name", None, "joined"])
    sheet.append(["Alice", 1, datetime.datetime(2024, 1, 15)])
    sheet.append([None, None, None])
    sheet.append(["Bob"])
    workbook.save(path)

    records = XlsxReader().read(str(path), ExtractionOptions())

    assert records == [
        {"name": "Alice", "column_2": 1, "joined": datetime.datetime(2024, 1, 15)},
        {"name": "Bob", "column_2": None, "joined": None},
    ]


def test_xlsx_repeated_header_keeps_later_column(tmp_path):
    path = tmp_path / "dupes.xlsx"
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(["a", "a", "b"])
    sheet.append([1, 2, 3])
    workbook.save(path)

    records = XlsxReader().read(str(path), ExtractionOptions())

    assert records == [{"a": 2, "b": 3}]


def test_xlsx_limit_closes_workbook(sample_xlsx, track_workbook_close):
    records = XlsxReader().read(sample_xlsx, ExtractionOptions(limit=1))
    assert records == [{"name": "Alice", "age": 30, "city": "Paris"}]
    assert track_workbook_close == [True]


def test_xlsx_early_close_closes_workbook(sample_xlsx, track_workbook_close):
    handle = XlsxReader().stream(sample_xlsx, ExtractionOptions())
    records = iter(handle)
    assert next(records)["name"] == "Alice"
    assert track_workbook_close == []

    handle.close()
    handle.close()
    assert track_workbook_close == [True]


def test_xlsx_unstarted_stream_closes_workbook(sample_xlsx, track_workbook_close):
    with XlsxReader().stream(sample_xlsx, ExtractionOptions()):
        pass
    assert track_workbook_close == [True]


def test_xlsx_missing_file_fails_on_open(tmp_path):
    with pytest.raises(FileNotFoundError):
        XlsxReader().stream(str(tmp_path / "missing.xlsx"), ExtractionOptions())


def test_xls_reads_legacy_workbook():
    records = XlsReader().read(LEGACY_XLS, ExtractionOptions())

    assert [r["name"] for r in records] == ["Alice", "Bob", "Charlie", "Dana"]
    assert records[0] == {"name": "Alice", "age": 30, "city": "Paris"}
    assert records[3] == {"name": "Dana", "age": None, "city": "Rome"}


def test_xls_legacy_workbook_positional():
    records = XlsReader().read(LEGACY_XLS, ExtractionOptions(no_headers=True, limit=2))
    assert records[0] == {"column_1": "name", "column_2": "age", "column_3": "city"}
    assert records[1]["column_1"] == "Alice"
    assert records[1]["column_2"] == 30


def fake_read_excel(frame, calls):
    def read_excel(file_path, sheet_name=0, header=0, engine=None):
        calls.append({"sheet_name": sheet_name, "header": header, "engine": engine})
        return frame.copy()

    return read_excel


@pytest.fixture
def legacy_frame():
    return pd.DataFrame([
        ["name", "age", 2024],
        ["Alice", 30.0, 1],
        [np.nan, np.nan, np.nan],
        ["Bob", np.nan, 2],
        ["Cara", 35.0, 3],
    ])


def test_xls_header_records(monkeypatch, legacy_frame):
    calls = []
    monkeypatch.setattr(excel_parser.pd, "read_excel", fake_read_excel(legacy_frame, calls))

    records = XlsReader().read("legacy.xls", ExtractionOptions())

    assert calls == [{"sheet_name": 0, "header": None, "engine": "xlrd"}]
    assert len(records) == 3
    assert records[0] == {"name": "Alice", "age": 30.0, "2024": 1}
    assert records[1]["age"] is None
    assert records[2]["2024"] == 3


def test_xls_positional_records(monkeypatch):
    frame = pd.DataFrame([["name", "age", np.nan], ["Alice", 30.0, np.nan], ["Bob", np.nan, np.nan]])
    calls = []
    monkeypatch.setattr(excel_parser.pd, "read_excel", fake_read_excel(frame, calls))

    records = XlsReader().read("legacy.xls", ExtractionOptions(no_headers=True))

    assert calls[0]["header"] is None
    assert records == [
        {"column_1": "name", "column_2": "age"},
        {"column_1": "Alice", "column_2": 30.0},
        {"column_1": "Bob"},
    ]


def test_xls_limit_truncates(monkeypatch, legacy_frame):
    monkeypatch.setattr(excel_parser.pd, "read_excel", fake_read_excel(legacy_frame, []))

    records = XlsReader().read("legacy.xls", ExtractionOptions(limit=2))
    assert [r["name"] for r in records] == ["Alice", "Bob"]

    with XlsReader().stream("legacy.xls", ExtractionOptions(limit=1)) as handle:
        assert [r["name"] for r in handle] == ["Alice"]
