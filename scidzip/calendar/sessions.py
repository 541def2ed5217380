"""Trading-session filter around weekends and holidays.

A calendar day is a non-trading day when it is a Saturday, a Sunday or a
holiday. Ticks on a non-trading day are dropped unless they fall in the
evening session (at or after 18:00) that opens the next trading day. Ahead of
a non-trading day, ticks at or after the 16:30 early close are dropped.
"""

from __future__ import annotations

from datetime import time, timedelta

import numpy as np
import pandas as pd

from .holidays import HolidayCalendar

EVENING_OPEN = time(18, 0)
EARLY_CLOSE = time(16, 30)

_EVENING_OPEN_US = np.timedelta64(18 * 3600 * 1_000_000, "us")
_EARLY_CLOSE_US = np.timedelta64((16 * 3600 + 30 * 60) * 1_000_000, "us")
_ONE_DAY = np.timedelta64(1, "D")


class SessionFilter:
    """Keep/drop decision for exchange-local timestamps."""

    def __init__(self, calendar: HolidayCalendar):
        self.calendar = calendar

    def keep(self, ts: pd.Timestamp) -> bool:
        """Whether a tick at local wall-clock time ``ts`` is inside a session."""
        day = ts.date()
        tod = ts.time()
        next_trading = self.calendar.is_trading_day(day + timedelta(days=1))

        if not self.calendar.is_trading_day(day):
            if tod < EVENING_OPEN or not next_trading:
                return False
        if not next_trading and tod >= EARLY_CLOSE:
            return False
        return True

    def mask(self, index: pd.DatetimeIndex) -> np.ndarray:
        """Boolean array equal to ``[keep(ts) for ts in index]``."""
        wall = index.tz_localize(None) if index.tz is not None else index
        values = wall.values.astype("datetime64[us]")
        days = values.astype("datetime64[D]")
        tod = values - days

        trading = self.calendar.trading_day_mask(days)
        next_trading = self.calendar.trading_day_mask(days + _ONE_DAY)

        keep = trading | ((tod >= _EVENING_OPEN_US) & next_trading)
        keep &= next_trading | (tod < _EARLY_CLOSE_US)
        return keep
