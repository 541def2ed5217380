"""Run-wide outcome log shared by all workers."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO, Union

from ..errors import ReturnCode

logger = logging.getLogger(__name__)

LOG_FILENAME = "scidzip.log"


@dataclass(frozen=True)
class RunLogEntry:
    timestamp: datetime
    code: ReturnCode
    message: str

    def format(self) -> str:
        return f"{self.timestamp.isoformat(timespec='seconds')} {self.code.name} {self.message}"


class RunLog:
    """Append-only record of per-file outcomes plus the worst code seen.

    ``record`` may be called concurrently from worker threads: appends to the
    entry list and log file, and the worst-code reduction, happen under one
    lock. The reduction keeps the minimum code (errors are negative), so the
    result does not depend on the order workers finish in.
    """

    def __init__(self, path: Optional[Union[str, os.PathLike]] = None):
        self.path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._entries: List[RunLogEntry] = []
        self._worst = ReturnCode.SUCCESSFUL
        self._fh: Optional[TextIO] = None
        if self.path is not None:
            self._fh = self.path.open("a", encoding="utf-8")

    def __enter__(self) -> "RunLog":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def record(self, code: ReturnCode, message: str) -> ReturnCode:
        """Log ``message`` under ``code`` and fold ``code`` into :attr:`worst_code`."""
        code = ReturnCode(code)
        entry = RunLogEntry(datetime.now(), code, message)
        logger.log(logging.ERROR if code.is_error else logging.INFO, "%s: %s", code.name, message)

        with self._lock:
            self._entries.append(entry)
            if code < self._worst:
                self._worst = code
            if self._fh is not None:
                self._fh.write(entry.format() + "\n")
                self._fh.flush()
        return code

    @property
    def worst_code(self) -> ReturnCode:
        with self._lock:
            return self._worst

    @property
    def entries(self) -> List[RunLogEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def exit_status(self) -> int:
        """Process exit status: 1 if any file failed, else 0."""
        return 1 if self.worst_code.is_error else 0

    def close(self) -> None:
        with self._lock:
            if self._fh is not None:
                try:
                    self._fh.close()
                finally:
                    self._fh = None
