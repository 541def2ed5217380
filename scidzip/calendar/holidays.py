"""Market holiday calendar."""

from __future__ import annotations

import logging
import os
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator, Tuple, Union

import numpy as np
import pandas as pd

from ..errors import HolidayFileInvalid

logger = logging.getLogger(__name__)

# Monday..Friday
WEEKMASK = "1111100"


class HolidayCalendar:
    """Ordered, duplicate-free set of exchange holidays.

    Built once before any file is processed and read-only afterwards, so it is
    safe to share between worker threads without locking.
    """

    def __init__(self, holidays: Iterable[date] = ()):
        dates = tuple(holidays)
        for prev, cur in zip(dates, dates[1:]):
            if cur == prev:
                raise HolidayFileInvalid(f"Duplicate holiday: {cur.isoformat()}")
            if cur < prev:
                raise HolidayFileInvalid(f"Holiday out of order: {cur.isoformat()} follows {prev.isoformat()}")

        self._dates: Tuple[date, ...] = dates
        self._lookup = frozenset(dates)
        self._np_holidays = np.array([np.datetime64(d, "D") for d in dates], dtype="datetime64[D]")

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, source: str = "<lines>") -> "HolidayCalendar":
        """Parse one ISO ``YYYY-MM-DD`` date per line; blank lines and ``#`` comments are skipped."""
        dates = []
        for lineno, raw in enumerate(lines, start=1):
            text = raw.split("#", 1)[0].strip()
            if not text:
                continue
            try:
                parsed = pd.to_datetime(text, format="%Y-%m-%d")
            except ValueError as exc:
                raise HolidayFileInvalid(f"{source}:{lineno}: invalid holiday date {text!r}") from exc
            # "NaT" parses to a missing value rather than failing
            if pd.isna(parsed):
                raise HolidayFileInvalid(f"{source}:{lineno}: invalid holiday date {text!r}")
            dates.append(parsed.date())
        try:
            return cls(dates)
        except HolidayFileInvalid as exc:
            raise HolidayFileInvalid(f"{source}: {exc}") from None

    @classmethod
    def from_file(cls, path: Union[str, os.PathLike]) -> "HolidayCalendar":
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as fh:
                calendar = cls.from_lines(fh, source=str(path))
        except UnicodeDecodeError as exc:
            raise HolidayFileInvalid(f"{path}: not a UTF-8 text file ({exc.reason})") from exc
        logger.info("Loaded %d holidays from %s", len(calendar), path)
        return calendar

    def __len__(self) -> int:
        return len(self._dates)

    def __iter__(self) -> Iterator[date]:
        return iter(self._dates)

    def __contains__(self, day: object) -> bool:
        return day in self._lookup

    def __repr__(self) -> str:
        return f"HolidayCalendar({len(self)} holidays)"

    def is_trading_day(self, day: date) -> bool:
        """Weekdays that are not holidays."""
        return day.weekday() < 5 and day not in self._lookup

    def trading_day_mask(self, days: np.ndarray) -> np.ndarray:
        """Vectorised :meth:`is_trading_day` over a ``datetime64[D]`` array."""
        return np.is_busday(np.asarray(days, dtype="datetime64[D]"), weekmask=WEEKMASK, holidays=self._np_holidays)
