import codecs
import pandas as pd
import numpy as np
from typing import Any, Iterable, List

from .models import Record

POSITIONAL_PREFIX = "column_"


def convert_numpy_types(obj: Any) -> Any:
    """
    Recursively convert numpy types to Python native types.

    Args:
        obj: Object that may contain numpy types

    Returns:
        Object with numpy types converted to Python native types, NaN as None
    """
    if isinstance(obj, dict):
        return {key: convert_numpy_types(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [convert_numpy_types(item) for item in obj]
    elif isinstance(obj, tuple):
        return tuple(convert_numpy_types(item) for item in obj)
    elif isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return None if np.isnan(obj) else float(obj)
    elif isinstance(obj, np.bool_):
        return bool(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, pd.Timestamp):
        return None if pd.isna(obj) else obj.to_pydatetime()
    elif is_missing(obj):
        return None
    elif hasattr(obj, 'item'):  # Other numpy scalars
        return obj.item()
    else:
        return obj


def is_missing(value: Any) -> bool:
    """True for None and pandas/numpy missing markers (NaN, NaT, NA)."""
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # Array-likes have no single truth value
        return False


def strip_quotes(value: Any) -> Any:
    """Remove stray double-quote characters from string values."""
    if isinstance(value, str):
        return value.replace('"', '')
    return value


def positional_record(values: Iterable[Any], strip: bool = False) -> Record:
    """
    Key a row of values by 1-based position: column_1, column_2, ...

    Args:
        values: Field values in source column order
        strip: Remove double quotes from string values
    """
    return {
        f"{POSITIONAL_PREFIX}{index}": strip_quotes(value) if strip else value
        for index, value in enumerate(values, 1)
    }


def header_names(values: Iterable[Any]) -> List[str]:
    """
    Column names from a header row.

    Empty header cells get the positional name of their column. Repeated
    names are kept as they are, so the later column wins when a row is keyed.
    """
    names = []
    for index, value in enumerate(values, 1):
        if is_missing(value) or value == "":
            names.append(f"{POSITIONAL_PREFIX}{index}")
        elif isinstance(value, float) and value.is_integer():
            names.append(str(int(value)))
        else:
            names.append(str(value))
    return names


def trim_trailing_missing(values: Iterable[Any]) -> List[Any]:
    """Drop empty cells after the last non-empty one."""
    values = list(values)
    end = len(values)
    while end and is_missing(values[end - 1]):
        end -= 1
    return values[:end]


def text_encoding(encoding: str) -> str:
    """Read UTF-8 through 'utf-8-sig' so a leading BOM is dropped."""
    if codecs.lookup(encoding).name == "utf-8":
        return "utf-8-sig"
    return encoding
