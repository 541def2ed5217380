from __future__ import annotations

import io
import struct
from pathlib import Path

import numpy as np
import pytest

from scidzip.errors import IOErrorReadingData
from scidzip.parser.scid_format import (
    DTYPE_TICK_RECORD,
    HEADER_FIELDS_SIZE,
    RECORD_FIELDS,
    RECORD_SIZE,
    SCID_MAGIC,
    TickRecord,
    decode_record,
    iter_record_chunks,
    iter_records,
    pack_header,
    pack_record,
    peek_range,
    read_header,
)

from tests.utils_scid import make_records, scid_bytes, write_scid_file


def test_layout_constants() -> None:
    assert RECORD_SIZE == 40
    assert DTYPE_TICK_RECORD.itemsize == RECORD_SIZE
    for name, _, offset in RECORD_FIELDS:
        assert DTYPE_TICK_RECORD.fields[name][1] == offset
    assert pack_header()[:4] == b"SCID"
    assert struct.unpack_from("<I", b"SCID")[0] == SCID_MAGIC


def test_header_round_trip_skips_padding() -> None:
    stream = io.BytesIO(pack_header(header_size=60, version=3) + b"\xff" * RECORD_SIZE)
    header = read_header(stream)

    assert header.magic == SCID_MAGIC
    assert header.header_size == 60
    assert header.record_size == RECORD_SIZE
    assert header.version == 3
    assert stream.tell() == 60


def test_header_without_padding() -> None:
    stream = io.BytesIO(pack_header(header_size=HEADER_FIELDS_SIZE))
    assert read_header(stream).header_size == HEADER_FIELDS_SIZE
    assert stream.read() == b""


def test_record_round_trip_keeps_microseconds() -> None:
    record = TickRecord(
        raw_timestamp=3_808_000_000_123_457,
        open=4321.25,
        high=4322.5,
        low=4320.0,
        close=float(np.float32(4321.1)),
        num_trades=7,
        total_volume=2**32 - 1,
        bid_volume=3,
        ask_volume=4,
    )
    buf = pack_record(record)

    assert len(buf) == RECORD_SIZE
    assert decode_record(buf) == record
    assert struct.unpack_from("<q", buf, 0)[0] == 3_808_000_000_123_457


def test_scalar_and_block_decoders_agree() -> None:
    raw = [3_808_000_000_000_001, 3_808_000_000_500_000, 3_808_000_001_000_000]
    data = scid_bytes(raw, closes=[1.25, 2.5, 3.75])

    stream = io.BytesIO(data)
    read_header(stream)
    records = list(iter_records(stream))

    stream = io.BytesIO(data)
    read_header(stream)
    (block,) = list(iter_record_chunks(stream))

    assert [r.raw_timestamp for r in records] == raw
    assert block["DateTime"].tolist() == raw
    assert [r.close for r in records] == [1.25, 2.5, 3.75]
    assert block["AskVolume"].tolist() == [r.ask_volume for r in records]


def test_iter_record_chunks_sizes() -> None:
    stream = io.BytesIO(scid_bytes(list(range(5))))
    read_header(stream)

    chunks = list(iter_record_chunks(stream, chunk_records=2))

    assert [len(c) for c in chunks] == [2, 2, 1]
    assert np.concatenate(chunks)["DateTime"].tolist() == [0, 1, 2, 3, 4]


def test_iter_record_chunks_rejects_bad_size() -> None:
    with pytest.raises(ValueError):
        list(iter_record_chunks(io.BytesIO(b""), chunk_records=0))


@pytest.mark.parametrize(
    "data",
    [
        b"",
        pack_header()[:10],
        pack_header(header_size=56)[:30],
    ],
)
def test_truncated_header(data: bytes) -> None:
    with pytest.raises(IOErrorReadingData):
        read_header(io.BytesIO(data))


def test_bad_magic() -> None:
    with pytest.raises(IOErrorReadingData, match="magic"):
        read_header(io.BytesIO(pack_header(magic=0x12345678)))


def test_unexpected_record_size() -> None:
    with pytest.raises(IOErrorReadingData, match="Record size"):
        read_header(io.BytesIO(pack_header(record_size=44)))


def test_truncated_record() -> None:
    data = scid_bytes([1, 2])[:-12]

    stream = io.BytesIO(data)
    read_header(stream)
    it = iter_records(stream)
    assert next(it).raw_timestamp == 1
    with pytest.raises(IOErrorReadingData):
        next(it)

    stream = io.BytesIO(data)
    read_header(stream)
    with pytest.raises(IOErrorReadingData):
        list(iter_record_chunks(stream))


def test_peek_range(tmp_path: Path) -> None:
    path = write_scid_file(tmp_path, "ESZ20.scid", [10, 20, 30])
    header, count, first, last = peek_range(path)

    assert header.record_size == RECORD_SIZE
    assert (count, first, last) == (3, 10, 30)


def test_peek_range_empty(tmp_path: Path) -> None:
    path = write_scid_file(tmp_path, "ESZ20.scid", [])
    _, count, first, last = peek_range(path)
    assert (count, first, last) == (0, None, None)


def test_peek_range_truncated(tmp_path: Path) -> None:
    path = tmp_path / "ESZ20.scid"
    path.write_bytes(pack_header() + make_records([1]).tobytes()[:20])
    with pytest.raises(IOErrorReadingData):
        peek_range(path)
