"""
ZIP archive reader.

One entry is copied out of the archive into the temporary directory and
handed back to the orchestrator, which reads it like any other file with
the same options. The copy is deleted when the read finishes: right away
for batch reads, when the stream closes for streamed reads, and on every
error path.
"""
import os
import shutil
import time
import uuid
import zipfile
from typing import List, Optional, Union

from . import config
from .base import BaseReader, RecordPipeline
from .errors import NoEntryFoundError
from .logging_config import get_logger
from .models import ExtractionOptions, FormatTag, Record
from .stream import StreamHandle

logger = get_logger(__name__)


def select_entry(
    entries: List[zipfile.ZipInfo], target: Union[int, str, None] = None
) -> Optional[zipfile.ZipInfo]:
    """
    Pick the archive entry to extract.

    Args:
        entries: Archive entries in archive order
        target: Index into `entries`, a substring of the entry name, or None
            for the first file entry

    Returns:
        The selected file entry, or None when nothing matches
    """
    if isinstance(target, int):
        entry = entries[target] if 0 <= target < len(entries) else None
    elif isinstance(target, str):
        entry = next((e for e in entries if not e.is_dir() and target in e.filename), None)
    else:
        entry = next((e for e in entries if not e.is_dir()), None)

    if entry is None or entry.is_dir():
        return None
    return entry


class ZipReader(BaseReader):
    """Reader for .zip archives holding one of the other supported formats."""

    format_tag = FormatTag.ARCHIVE

    def __init__(self, pipeline: RecordPipeline, temp_dir: Optional[str] = None):
        """
        Args:
            pipeline: Orchestrator used to read the extracted entry
            temp_dir: Directory for extracted entries (config.TEMP_DIR by default)
        """
        super().__init__("ZIP")
        self.pipeline = pipeline
        self.temp_dir = temp_dir or config.TEMP_DIR

    def read(self, file_path: str, options: ExtractionOptions) -> List[Record]:
        extracted = self.extract_entry(file_path, options.archive_target)
        try:
            return self.pipeline.read_records(extracted, options)
        finally:
            self._cleanup(extracted)

    def stream(self, file_path: str, options: ExtractionOptions) -> StreamHandle:
        extracted = self.extract_entry(file_path, options.archive_target)
        try:
            inner = self.pipeline.stream_records(extracted, options)
        except BaseException:
            self._cleanup(extracted)
            raise

        records = inner.records()
        records.on_close(lambda: self._cleanup(extracted))
        return StreamHandle(source=records, format=self.format_tag)

    def extract_entry(self, archive_path: str, target: Union[int, str, None] = None) -> str:
        """
        Copy the selected entry into the temporary directory.

        Returns:
            Path of the extracted file

        Raises:
            NoEntryFoundError: If no entry matches `target`
        """
        with zipfile.ZipFile(archive_path) as archive:
            entry = select_entry(archive.infolist(), target)
            if entry is None:
                raise NoEntryFoundError(archive_path, target)

            os.makedirs(self.temp_dir, exist_ok=True)
            base_name = os.path.basename(entry.filename)
            temp_name = f"extracted_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}_{base_name}"
            temp_path = os.path.join(self.temp_dir, temp_name)

            try:
                with archive.open(entry) as src, open(temp_path, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            except BaseException:
                self._cleanup(temp_path)
                raise

        logger.debug(f"Extracted '{entry.filename}' from {os.path.basename(archive_path)}")
        return temp_path

    def _cleanup(self, temp_path: str) -> None:
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        except OSError as e:
            logger.error(f"Failed to remove extracted file {temp_path}: {e}")
