"""One-tick-per-second deduplication."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd


def wall_seconds(index: pd.DatetimeIndex) -> np.ndarray:
    """Whole seconds of local wall-clock time, as int64, for each entry of ``index``."""
    wall = index.tz_localize(None) if index.tz is not None else index
    return wall.values.astype("datetime64[s]").astype(np.int64)


class TickDeduplicator:
    """Keep the first tick seen in each second of local time.

    Input is assumed to be time ordered, so only the last emitted second is
    tracked. Feed it blocks in file order; state carries across blocks.
    """

    def __init__(self) -> None:
        self._last: Optional[int] = None

    @property
    def last_second(self) -> Optional[int]:
        return self._last

    def reset(self) -> None:
        self._last = None

    def accept(self, second: int) -> bool:
        """Return True if ``second`` differs from the previously emitted one."""
        if second == self._last:
            return False
        self._last = second
        return True

    def first_in_second(self, seconds: np.ndarray) -> np.ndarray:
        """Block form of :meth:`accept`: mask of entries opening a new second."""
        seconds = np.asarray(seconds, dtype=np.int64)
        keep = np.empty(seconds.shape, dtype=bool)
        if seconds.size == 0:
            return keep

        keep[0] = self._last is None or seconds[0] != self._last
        keep[1:] = seconds[1:] != seconds[:-1]
        self._last = int(seconds[-1])
        return keep
