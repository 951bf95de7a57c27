"""
Column projection and renaming.

The same function backs batch results and streamed records: batch calls
map it over the list, streams get it as their last pending stage.
"""
from typing import Optional

from .models import ExtractionOptions, Record
from .stream import Stage


def project(record: Record, options: ExtractionOptions) -> Record:
    """
    Keep the configured columns, then rename them.

    Columns are kept in `options.columns` order and silently dropped when
    absent from the record. Renaming runs over the surviving keys in order;
    when two keys map to the same new name the later one wins.

    Returns the record itself when no projection is configured.
    """
    if not options.has_projection:
        return record

    if options.columns is not None:
        filtered = {col: record[col] for col in options.columns if col in record}
    else:
        filtered = dict(record)

    if options.column_mapping is None:
        return filtered

    mapped: Record = {}
    for key, value in filtered.items():
        mapped[options.column_mapping.get(key) or key] = value
    return mapped


def projection_stage(options: ExtractionOptions) -> Optional[Stage]:
    """Stream stage applying project(), or None when there is nothing to project."""
    if not options.has_projection:
        return None

    def _stage(record: Record) -> Record:
        return project(record, options)

    return _stage
