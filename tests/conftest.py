import json
import zipfile

import openpyxl
import pytest

from data_extract import UniversalExtractor

CSV_TEXT = "name,age,city\nAlice,30,Paris\nBob,25,London\nCharlie,35,Berlin\n"

PEOPLE = [
    {"name": "Alice", "age": 30, "city": "Paris"},
    {"name": "Bob", "age": 25, "city": "London"},
    {"name": "Charlie", "age": 35, "city": "Berlin"},
]


@pytest.fixture
def sample_csv(tmp_path):
    path = tmp_path / "test.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return str(path)


@pytest.fixture
def sample_json(tmp_path):
    path = tmp_path / "test.json"
    path.write_text(json.dumps(PEOPLE), encoding="utf-8")
    return str(path)


@pytest.fixture
def sample_xlsx(tmp_path):
    path = tmp_path / "test.xlsx"
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "People"
    sheet.append(["name", "age", "city"])
    for person in PEOPLE:
        sheet.append([person["name"], person["age"], person["city"]])

    other = workbook.create_sheet("Ignored")
    other.append(["id"])
    other.append([1])

    workbook.save(path)
    return str(path)


@pytest.fixture
def sample_zip(tmp_path):
    """Archive with a directory entry, a CSV file and a JSON file, in that order."""
    path = tmp_path / "bundle.zip"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("data/", "")
        archive.writestr("data/test.csv", CSV_TEXT)
        archive.writestr("other.json", json.dumps(PEOPLE))
    return str(path)


@pytest.fixture
def temp_dir(tmp_path):
    return str(tmp_path / "extracted")


@pytest.fixture
def extractor(temp_dir):
    return UniversalExtractor(temp_dir=temp_dir)
