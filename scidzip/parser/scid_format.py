# scid_format.py
"""
Explicit-offset codec for Sierra Chart Intraday (.scid) files.

Layout
------
All integers and floats are little-endian; fields are packed on 2-byte
boundaries with no interior padding.

Header (``header_size`` bytes, typically 56)::

    offset  size  field
    0       4     magic         u32  0x44494353 ("SCID")
    4       4     header_size   u32
    8       4     record_size   u32  must be 40
    12      2     version       u16
    14      ...   reserved, skipped

Record (40 bytes)::

    offset  size  field
    0       8     DateTime      i64  microseconds since 1899-12-30 00:00:00 UTC
    8       4     Open          f32
    12      4     High          f32
    16      4     Low           f32
    20      4     Close         f32
    24      4     NumTrades     u32
    28      4     TotalVolume   u32
    32      4     BidVolume     u32
    36      4     AskVolume     u32

Both the per-record decoder and the block decoder are driven by the offset
tables below, so the on-disk format never depends on host struct layout.
"""
from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple, Union

import numpy as np

from ..errors import IOErrorReadingData

SCID_MAGIC = 0x44494353  # b"SCID" read as little-endian u32
DEFAULT_HEADER_SIZE = 56
DEFAULT_VERSION = 1

# (name, struct format, offset)
HEADER_FIELDS: Tuple[Tuple[str, str, int], ...] = (
    ("magic", "<I", 0),
    ("header_size", "<I", 4),
    ("record_size", "<I", 8),
    ("version", "<H", 12),
)
HEADER_FIELDS_SIZE = 14

RECORD_FIELDS: Tuple[Tuple[str, str, int], ...] = (
    ("DateTime", "<q", 0),
    ("Open", "<f", 8),
    ("High", "<f", 12),
    ("Low", "<f", 16),
    ("Close", "<f", 20),
    ("NumTrades", "<I", 24),
    ("TotalVolume", "<I", 28),
    ("BidVolume", "<I", 32),
    ("AskVolume", "<I", 36),
)
RECORD_SIZE = 40

_NUMPY_FORMATS = {"<q": "<i8", "<f": "<f4", "<I": "<u4"}

# NumPy structured dtype built from the same offsets (itemsize pinned, no alignment)
DTYPE_TICK_RECORD = np.dtype({
    "names": [name for name, _, _ in RECORD_FIELDS],
    "formats": [_NUMPY_FORMATS[fmt] for _, fmt, _ in RECORD_FIELDS],
    "offsets": [offset for _, _, offset in RECORD_FIELDS],
    "itemsize": RECORD_SIZE,
})

_RECORD_ATTRS = {
    "DateTime": "raw_timestamp",
    "Open": "open",
    "High": "high",
    "Low": "low",
    "Close": "close",
    "NumTrades": "num_trades",
    "TotalVolume": "total_volume",
    "BidVolume": "bid_volume",
    "AskVolume": "ask_volume",
}


@dataclass(frozen=True)
class FileHeader:
    magic: int
    header_size: int
    record_size: int
    version: int


@dataclass(frozen=True)
class TickRecord:
    raw_timestamp: int
    open: float
    high: float
    low: float
    close: float
    num_trades: int
    total_volume: int
    bid_volume: int
    ask_volume: int


def _read_exact(stream: BinaryIO, n: int, what: str) -> bytes:
    data = stream.read(n)
    if data is None or len(data) != n:
        got = 0 if data is None else len(data)
        raise IOErrorReadingData(f"Truncated {what}: expected {n} bytes, got {got}")
    return data


# ------------------------------- header codec --------------------------------
def decode_header(buf: bytes) -> FileHeader:
    """Decode the four leading header fields from ``buf`` (at least 14 bytes)."""
    if len(buf) < HEADER_FIELDS_SIZE:
        raise IOErrorReadingData(f"Truncated header: expected {HEADER_FIELDS_SIZE} bytes, got {len(buf)}")
    values = {name: struct.unpack_from(fmt, buf, offset)[0] for name, fmt, offset in HEADER_FIELDS}
    return FileHeader(**values)


def read_header(stream: BinaryIO) -> FileHeader:
    """Read and validate the header, leaving ``stream`` at the first record.

    Raises :class:`IOErrorReadingData` when the stream is too short, the magic
    is wrong, or the declared record size is not :data:`RECORD_SIZE`.
    """
    header = decode_header(_read_exact(stream, HEADER_FIELDS_SIZE, "header"))

    if header.magic != SCID_MAGIC:
        raise IOErrorReadingData(f"Bad SCID magic 0x{header.magic:08X}")
    if header.header_size < HEADER_FIELDS_SIZE:
        raise IOErrorReadingData(f"Header size {header.header_size} is smaller than {HEADER_FIELDS_SIZE}")
    if header.record_size != RECORD_SIZE:
        raise IOErrorReadingData(f"Record size {header.record_size} does not match expected {RECORD_SIZE}")

    # skip remaining bytes of header
    remaining = header.header_size - HEADER_FIELDS_SIZE
    if remaining:
        _read_exact(stream, remaining, "header padding")
    return header


def pack_header(
    *,
    header_size: int = DEFAULT_HEADER_SIZE,
    record_size: int = RECORD_SIZE,
    version: int = DEFAULT_VERSION,
    magic: int = SCID_MAGIC,
) -> bytes:
    """Return ``header_size`` bytes holding the given fields, zero padded."""
    header = bytearray(max(header_size, HEADER_FIELDS_SIZE))
    values = {"magic": magic, "header_size": header_size, "record_size": record_size, "version": version}
    for name, fmt, offset in HEADER_FIELDS:
        struct.pack_into(fmt, header, offset, values[name])
    return bytes(header)


# ------------------------------- record codec --------------------------------
def decode_record(buf: bytes, offset: int = 0) -> TickRecord:
    """Decode one record starting at ``offset`` of ``buf``."""
    if len(buf) - offset < RECORD_SIZE:
        raise IOErrorReadingData(f"Truncated record: expected {RECORD_SIZE} bytes, got {len(buf) - offset}")
    values = {
        _RECORD_ATTRS[name]: struct.unpack_from(fmt, buf, offset + field_offset)[0]
        for name, fmt, field_offset in RECORD_FIELDS
    }
    return TickRecord(**values)


def pack_record(record: TickRecord) -> bytes:
    """Pack ``record`` into its 40-byte on-disk form."""
    out = bytearray(RECORD_SIZE)
    for name, fmt, offset in RECORD_FIELDS:
        struct.pack_into(fmt, out, offset, getattr(record, _RECORD_ATTRS[name]))
    return bytes(out)


def iter_records(stream: BinaryIO) -> Iterator[TickRecord]:
    """Yield records one at a time until ``stream`` is exhausted.

    A trailing partial record raises :class:`IOErrorReadingData`.
    """
    while True:
        buf = stream.read(RECORD_SIZE)
        if not buf:
            return
        if len(buf) != RECORD_SIZE:
            raise IOErrorReadingData(f"Truncated record: expected {RECORD_SIZE} bytes, got {len(buf)}")
        yield decode_record(buf)


def iter_record_chunks(stream: BinaryIO, *, chunk_records: int = 1_000_000) -> Iterator[np.ndarray]:
    """Yield structured arrays (:data:`DTYPE_TICK_RECORD`) of at most ``chunk_records`` records."""
    if chunk_records <= 0:
        raise ValueError("chunk_records must be a positive integer")

    chunk_bytes = chunk_records * RECORD_SIZE
    while True:
        buf = stream.read(chunk_bytes)
        if not buf:
            return
        if len(buf) % RECORD_SIZE != 0:
            raise IOErrorReadingData(
                f"Truncated record: {len(buf) % RECORD_SIZE} trailing bytes after {len(buf) // RECORD_SIZE} records"
            )
        yield np.frombuffer(buf, dtype=DTYPE_TICK_RECORD)


def pack_records(records: np.ndarray) -> bytes:
    """Serialise a :data:`DTYPE_TICK_RECORD` array to contiguous record bytes."""
    return np.ascontiguousarray(records, dtype=DTYPE_TICK_RECORD).tobytes()


# --------------------------------- file peek ---------------------------------
def peek_range(path: Union[str, os.PathLike]) -> Tuple[FileHeader, int, Optional[int], Optional[int]]:
    """Return ``(header, count, first_raw, last_raw)`` without reading every record.

    ``first_raw``/``last_raw`` are raw SCDateTime values, ``None`` for an empty file.
    """
    path = Path(path)
    size = path.stat().st_size
    with path.open("rb") as fh:
        header = read_header(fh)
        data_size = size - header.header_size
        if data_size % RECORD_SIZE != 0:
            raise IOErrorReadingData(
                f"Data size {data_size} (after {header.header_size}-byte header) is not a multiple of {RECORD_SIZE}"
            )
        count = data_size // RECORD_SIZE
        if count == 0:
            return header, 0, None, None

        first = decode_record(_read_exact(fh, RECORD_SIZE, "record")).raw_timestamp
        fh.seek(header.header_size + (count - 1) * RECORD_SIZE)
        last = decode_record(_read_exact(fh, RECORD_SIZE, "record")).raw_timestamp
    return header, count, first, last
