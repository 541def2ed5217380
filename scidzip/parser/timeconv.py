"""Sierra Chart SCDateTime to exchange-local time conversion."""

from __future__ import annotations

from typing import Union

import numpy as np
import pandas as pd

# Sierra Chart epoch: 1899-12-30 00:00:00 UTC
# Unix epoch: 1970-01-01 00:00:00 UTC
# Difference: 25569 days * 86400 seconds * 1000000 microseconds
SC_EPOCH_OFFSET_US = 25569 * 86400 * 1_000_000
SC_EPOCH = pd.Timestamp("1899-12-30", tz="UTC")

# Range representable by pandas timestamps, in UNIX epoch microseconds
MIN_EPOCH_US = pd.Timestamp.min.value // 1_000 + 1
MAX_EPOCH_US = pd.Timestamp.max.value // 1_000


def sc_microseconds_to_epoch_us(raw: Union[np.ndarray, int]) -> Union[np.ndarray, int]:
    """Convert SCDateTime microseconds (since 1899-12-30) to UNIX epoch microseconds."""
    if isinstance(raw, np.ndarray):
        return raw.astype(np.int64, copy=False) - SC_EPOCH_OFFSET_US
    return int(raw) - SC_EPOCH_OFFSET_US


def epoch_us_to_sc_microseconds(ts: pd.Timestamp) -> int:
    """Inverse of :func:`sc_microseconds_to_epoch_us` for a single timestamp.

    Naive timestamps are taken to be UTC.
    """
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return int(ts.tz_convert("UTC").value // 1_000) + SC_EPOCH_OFFSET_US


class TimeConverter:
    """Project raw SCDateTime values into a fixed exchange timezone.

    The timezone is injected by IANA name (``America/New_York`` for CME
    products) so that historical daylight-saving rules come from the tz
    database rather than the host's locale. Conversions are pure functions of
    their input: instants are only re-labelled, so non-decreasing raw values
    map to non-decreasing local instants.
    """

    def __init__(self, tz: str = "America/New_York"):
        self.tz = tz

    def __repr__(self) -> str:
        return f"TimeConverter(tz={self.tz!r})"

    def to_local(self, raw: int) -> pd.Timestamp:
        """Convert one raw SCDateTime to a tz-aware local :class:`pandas.Timestamp`.

        Raises ``ValueError`` for values outside the pandas timestamp range.
        """
        epoch_us = sc_microseconds_to_epoch_us(raw)
        if not MIN_EPOCH_US <= epoch_us <= MAX_EPOCH_US:
            raise ValueError(f"SCDateTime {int(raw)} is out of range")
        return pd.Timestamp(epoch_us, unit="us").tz_localize("UTC").tz_convert(self.tz)

    def to_local_index(self, raw: np.ndarray) -> pd.DatetimeIndex:
        """Vectorised :meth:`to_local` over an int64 array."""
        raw = np.asarray(raw, dtype=np.int64)
        epoch_us = sc_microseconds_to_epoch_us(raw)
        if epoch_us.size:
            bad = (epoch_us < MIN_EPOCH_US) | (epoch_us > MAX_EPOCH_US)
            if bad.any():
                first = int(np.flatnonzero(bad)[0])
                raise ValueError(f"SCDateTime {int(raw[first])} at position {first} is out of range")
        return pd.to_datetime(epoch_us, unit="us", utc=True).tz_convert(self.tz)

    def localize(self, year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> pd.Timestamp:
        """Wall-clock time in the exchange timezone."""
        return pd.Timestamp(year=year, month=month, day=day, hour=hour, minute=minute).tz_localize(self.tz)
