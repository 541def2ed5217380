"""Zip-compressed CSV output for converted contracts."""

from __future__ import annotations

import io
import logging
import os
import zipfile
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

logger = logging.getLogger(__name__)

VALUE_COLUMNS = ("Close", "BidVolume", "AskVolume")
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
PRICE_FORMAT = "%.2f"


class ArchiveWriter:
    """Stream CSV rows into a single entry of a new zip archive.

    Rows are written to ``<zip>.part`` and the archive only appears under its
    final name on :meth:`commit`; :meth:`abort` (or an exception inside the
    ``with`` block) removes the partial file.
    """

    def __init__(
        self,
        zip_path: Union[str, os.PathLike],
        entry_name: str,
        *,
        columns: Sequence[str] = ("DateTime",) + VALUE_COLUMNS,
    ):
        self.zip_path = Path(zip_path)
        self.entry_name = entry_name
        self.columns = list(columns)
        self.tmp_path = self.zip_path.with_name(self.zip_path.name + ".part")
        self.rows_written = 0

        self._zf: Optional[zipfile.ZipFile] = None
        self._fh: Optional[io.TextIOWrapper] = None

    def __enter__(self) -> "ArchiveWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.commit()
        else:
            self.abort()

    def open(self) -> "ArchiveWriter":
        if self._zf is not None:
            return self
        self._zf = zipfile.ZipFile(self.tmp_path, "w", compression=zipfile.ZIP_DEFLATED)
        entry = self._zf.open(self.entry_name, "w", force_zip64=True)
        self._fh = io.TextIOWrapper(entry, encoding="utf-8", newline="")
        self._fh.write(",".join(self.columns) + "\n")
        return self

    def write_rows(self, frame: pd.DataFrame) -> int:
        """Append ``frame`` (columns in :attr:`columns` order) and return its row count."""
        if self._fh is None:
            raise RuntimeError("ArchiveWriter not opened")
        if frame.empty:
            return 0
        frame.to_csv(
            self._fh,
            columns=self.columns,
            header=False,
            index=False,
            lineterminator="\n",
            float_format=PRICE_FORMAT,
        )
        self.rows_written += len(frame)
        return len(frame)

    def _close_handles(self) -> None:
        try:
            if self._fh is not None:
                self._fh.close()
        finally:
            self._fh = None
            if self._zf is not None:
                self._zf.close()
            self._zf = None

    def commit(self) -> Path:
        self._close_handles()
        os.replace(self.tmp_path, self.zip_path)
        logger.debug("Wrote %d rows to %s", self.rows_written, self.zip_path)
        return self.zip_path

    def abort(self) -> None:
        try:
            self._close_handles()
        finally:
            self.tmp_path.unlink(missing_ok=True)
