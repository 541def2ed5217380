"""Futures contract file names and their active date windows."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import pandas as pd

from ..errors import MalformedFuturesFileName
from .timeconv import TimeConverter

# Quarterly delivery months handled by the converter
MONTH_CODE_MAP: Dict[str, int] = {
    "H": 3,   # Mar
    "M": 6,   # Jun
    "U": 9,   # Sep
    "Z": 12,  # Dec
}

# Day and wall-clock time of the window boundaries
WINDOW_DAY = 9
WINDOW_HOUR = 18


@dataclass(frozen=True)
class ContractWindow:
    """Months of data retained for one contract.

    The effective range is ``[start_year-start_month-09 18:00, end_year-end_month-09 18:00)``
    in exchange-local time.
    """

    start_year: int
    start_month: int
    end_year: int
    end_month: int

    def __post_init__(self) -> None:
        if (self.start_year, self.start_month) >= (self.end_year, self.end_month):
            raise ValueError(f"Contract window start must precede its end: {self}")

    def bounds(self, converter: Optional[TimeConverter] = None) -> Tuple[pd.Timestamp, pd.Timestamp]:
        """Return tz-aware ``(start, end)`` timestamps in the converter's timezone."""
        converter = converter or TimeConverter()
        start = converter.localize(self.start_year, self.start_month, WINDOW_DAY, WINDOW_HOUR)
        end = converter.localize(self.end_year, self.end_month, WINDOW_DAY, WINDOW_HOUR)
        return start, end


@dataclass(frozen=True)
class ScidContractInfo:
    """Contract information parsed from a SCID filename."""

    ticker: str
    month: str
    year: int
    exchange: Optional[str]
    file_path: Path

    @property
    def contract_id(self) -> str:
        return f"{self.month}{str(self.year)[-2:]}"

    @property
    def stem(self) -> str:
        """Base name of the output artifacts, e.g. ``ESZ20``."""
        return f"{self.ticker}{self.contract_id}"

    @property
    def window(self) -> ContractWindow:
        return resolve_contract_window(self.month, self.year)


def resolve_contract_window(month_code: str, year: int) -> ContractWindow:
    """Get the start/end months of the data kept for ``month_code`` in ``year``.

    The window starts three months before the delivery month. ``H`` starts in
    December of the previous year; ``Z`` runs on until March of the next year.
    """
    code = month_code.upper()
    end_month = MONTH_CODE_MAP.get(code)
    if end_month is None:
        raise MalformedFuturesFileName(f"Invalid month code: {month_code!r}")

    start_year = end_year = year
    start_month = end_month - 3
    if code == "H":
        start_month = 12
        start_year = year - 1
    elif code == "Z":
        end_month = 3
        end_year = year + 1

    return ContractWindow(start_year, start_month, end_year, end_month)


_FILENAME_PATTERN = re.compile(
    r"(?P<month>[A-Z])(?P<year>\d{2})(?:-(?P<exchange>[A-Z]+))?",
    re.IGNORECASE,
)


def parse_contract_filename(path: Union[str, Path], root: str) -> ScidContractInfo:
    """Parse names like ``ESZ20.scid`` or ``ESZ20-CME.scid`` for futures ``root``.

    Raises :class:`MalformedFuturesFileName` when the name does not start with
    ``root``, the month code is not quarterly, or the year is not two digits.
    """
    file_path = Path(path)
    root = root.upper()
    stem = file_path.stem

    if not stem.upper().startswith(root):
        raise MalformedFuturesFileName(f"Malformed futures file name: {file_path} (expected root {root})")

    m = _FILENAME_PATTERN.fullmatch(stem[len(root):])
    if not m:
        raise MalformedFuturesFileName(f"Malformed futures file name: {file_path}")

    month = m.group("month").upper()
    if month not in MONTH_CODE_MAP:
        raise MalformedFuturesFileName(f"Malformed futures file name: {file_path} (month code {month!r})")

    exchange = m.group("exchange")
    return ScidContractInfo(
        ticker=root,
        month=month,
        year=2000 + int(m.group("year")),
        exchange=exchange.upper() if exchange else None,
        file_path=file_path,
    )
