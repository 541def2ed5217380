"""Run configuration for the SCID to zip converter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pandas as pd

DEFAULT_SYMBOL_ROOT = "ES"
DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_TIMESTAMP_LABEL = "DateTime"
DEFAULT_CHUNK_RECORDS = 1_000_000


@dataclass(frozen=True)
class ConverterConfig:
    """Settings shared by every worker in a batch run.

    Parameters
    ----------
    input_dir:
        Directory scanned (non-recursively) for ``{symbol_root}*.scid`` files.
    output_dir:
        Directory receiving one ``.zip`` archive per contract plus the run log.
    symbol_root:
        Futures root symbol, one to three letters (``ES`` for the CME e-mini).
    update_only:
        Skip contracts whose archive already exists in ``output_dir``.
    holidays_path:
        Optional file of market holidays, one ISO date per line.
    timezone:
        IANA name of the exchange timezone ticks are projected into.
    max_workers:
        Size of the worker pool; ``None`` lets the executor decide.
    chunk_records:
        Records decoded per block while streaming a file.
    timestamp_label:
        Header label of the timestamp column in the CSV output.
    """

    input_dir: Path
    output_dir: Path
    symbol_root: str = DEFAULT_SYMBOL_ROOT
    update_only: bool = True
    holidays_path: Optional[Path] = None
    timezone: str = DEFAULT_TIMEZONE
    max_workers: Optional[int] = field(default_factory=os.cpu_count)
    chunk_records: int = DEFAULT_CHUNK_RECORDS
    timestamp_label: str = DEFAULT_TIMESTAMP_LABEL

    def __post_init__(self) -> None:
        object.__setattr__(self, "input_dir", Path(self.input_dir))
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "symbol_root", self.symbol_root.upper())
        if self.holidays_path is not None:
            object.__setattr__(self, "holidays_path", Path(self.holidays_path))

    def validate(self) -> "ConverterConfig":
        """Raise ``ValueError`` on settings that would make the run meaningless."""
        if not (1 <= len(self.symbol_root) <= 3) or not self.symbol_root.isalpha():
            raise ValueError(f"Invalid futures contract symbol: {self.symbol_root!r}")
        if not self.input_dir.is_dir():
            raise ValueError(f"Input directory not found: {self.input_dir}")
        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError("max_workers must be a positive integer")
        if self.chunk_records <= 0:
            raise ValueError("chunk_records must be a positive integer")
        try:
            pd.Timestamp("2000-01-01", tz=self.timezone)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {self.timezone!r}") from exc
        if self.holidays_path is not None and not self.holidays_path.is_file():
            raise ValueError(f"Holiday file not found: {self.holidays_path}")
        return self
