from __future__ import annotations

import io
import zipfile
from datetime import date
from pathlib import Path
from typing import List

import pytest

from scidzip.calendar.holidays import HolidayCalendar
from scidzip.config import ConverterConfig
from scidzip.errors import ReturnCode
from scidzip.parser.contracts import resolve_contract_window
from scidzip.parser.scid_format import read_header
from scidzip.pipeline.convert import ConversionPipeline, OutputRow, PipelineState
from scidzip.pipeline.runlog import RunLog

from tests.utils_scid import scid_bytes, sc_raw, write_scid_file

# ESZ20 keeps 2020-09-09 18:00 up to (not including) 2021-03-09 18:00 New York time
Z20_TICKS = [
    ("2020-09-09 17:59:59", 3300.00),   # before the window
    ("2020-09-09 18:00:00", 3301.00),   # window start, Wednesday evening
    ("2020-09-10 10:00:00.100", 3350.25),
    ("2020-09-10 10:00:00.900", 3350.50),   # same second
    ("2020-09-10 10:00:01.000", 3351.75),
    ("2020-09-12 12:00:00", 3360.00),   # Saturday
    ("2020-09-13 18:00:00", 3362.50),   # Sunday evening session
    ("2021-03-09 18:00:00", 3900.00),   # window end: stops the stream
    ("2020-10-01 10:00:00", 3400.00),   # after the stop, never read
]

EXPECTED_CSV = [
    "DateTime,Close,BidVolume,AskVolume",
    "2020-09-09T18:00:00,3301.00,2,102",
    "2020-09-10T10:00:00,3350.25,3,103",
    "2020-09-10T10:00:01,3351.75,5,105",
    "2020-09-13T18:00:00,3362.50,7,107",
]


def _write_z20(directory: Path, name: str = "ESZ20.scid") -> Path:
    return write_scid_file(directory, name, [sc_raw(t) for t, _ in Z20_TICKS], [c for _, c in Z20_TICKS])


def _read_zip(path: Path, entry: str) -> List[str]:
    with zipfile.ZipFile(path) as zf:
        assert zf.namelist() == [entry]
        return zf.read(entry).decode("utf-8").splitlines()


@pytest.fixture
def dirs(tmp_path: Path):
    src = tmp_path / "in"
    out = tmp_path / "out"
    src.mkdir()
    out.mkdir()
    return src, out


def _pipeline(src: Path, out: Path, **kwargs) -> ConversionPipeline:
    config = ConverterConfig(input_dir=src, output_dir=out, **kwargs)
    return ConversionPipeline(config, HolidayCalendar(), RunLog())


@pytest.mark.parametrize("chunk_records", [1_000_000, 2, 1])
def test_end_to_end_december_contract(dirs, chunk_records: int) -> None:
    src, out = dirs
    path = _write_z20(src)
    pipeline = _pipeline(src, out, chunk_records=chunk_records)

    result = pipeline.run(path)

    assert result.state is PipelineState.SUCCEEDED
    assert result.code is ReturnCode.SUCCESSFUL
    assert result.rows == 4
    assert result.output_path == out / "ESZ20.zip"
    assert _read_zip(out / "ESZ20.zip", "ESZ20.csv") == EXPECTED_CSV
    assert not (out / "ESZ20.zip.part").exists()
    assert pipeline.log.worst_code is ReturnCode.SUCCESSFUL


def test_iter_rows(dirs) -> None:
    src, out = dirs
    pipeline = _pipeline(src, out)
    stream = io.BytesIO(scid_bytes([sc_raw(t) for t, _ in Z20_TICKS], [c for _, c in Z20_TICKS]))
    read_header(stream)

    rows = list(pipeline.iter_rows(stream, resolve_contract_window("Z", 2020)))

    assert [r.timestamp for r in rows] == [line.split(",")[0] for line in EXPECTED_CSV[1:]]
    assert rows[1] == OutputRow("2020-09-10T10:00:00", 3350.25, 3, 103)


def test_holidays_are_applied(dirs) -> None:
    src, out = dirs
    ticks = ["2020-09-04 16:29:59", "2020-09-04 16:30:00", "2020-09-07 12:00:00", "2020-09-07 18:00:00"]
    path = write_scid_file(src, "ESU20.scid", [sc_raw(t) for t in ticks])
    config = ConverterConfig(input_dir=src, output_dir=out)
    pipeline = ConversionPipeline(config, HolidayCalendar([date(2020, 9, 7)]), RunLog())

    # ESU20 stays active until 2020-09-09 18:00
    result = pipeline.run(path)
    assert result.state is PipelineState.SUCCEEDED
    assert [line.split(",")[0] for line in _read_zip(out / "ESU20.zip", "ESU20.csv")[1:]] == [
        "2020-09-04T16:29:59",
        "2020-09-07T18:00:00",
    ]


def test_custom_timestamp_label(dirs) -> None:
    src, out = dirs
    path = _write_z20(src)
    _pipeline(src, out, timestamp_label="Time").run(path)
    assert _read_zip(out / "ESZ20.zip", "ESZ20.csv")[0] == "Time,Close,BidVolume,AskVolume"


def test_exchange_suffix_maps_to_contract_stem(dirs) -> None:
    src, out = dirs
    path = _write_z20(src, "ESZ20-CME.scid")
    result = _pipeline(src, out).run(path)
    assert result.output_path == out / "ESZ20.zip"


def test_malformed_file_name(dirs) -> None:
    src, out = dirs
    path = _write_z20(src, "ESX20.scid")
    pipeline = _pipeline(src, out)

    result = pipeline.run(path)

    assert result.state is PipelineState.FAILED
    assert result.code is ReturnCode.MALFORMED_FUTURES_FILE_NAME
    assert list(out.iterdir()) == []
    assert pipeline.log.exit_status == 1


def test_truncated_data_leaves_no_artifact(dirs) -> None:
    src, out = dirs
    path = src / "ESZ20.scid"
    path.write_bytes(scid_bytes([sc_raw("2020-09-10 10:00")] * 3)[:-7])
    pipeline = _pipeline(src, out)

    result = pipeline.run(path)

    assert result.state is PipelineState.FAILED
    assert result.code is ReturnCode.IO_ERROR_READING_DATA
    assert list(out.iterdir()) == []


@pytest.mark.parametrize("chunk_records", [1_000_000, 1])
def test_out_of_range_timestamp_is_io_error(dirs, chunk_records: int) -> None:
    src, out = dirs
    path = write_scid_file(src, "ESH21.scid", [sc_raw("2021-01-05 10:00"), 2**62])

    result = _pipeline(src, out, chunk_records=chunk_records).run(path)

    assert result.state is PipelineState.FAILED
    assert result.code is ReturnCode.IO_ERROR_READING_DATA
    assert list(out.iterdir()) == []


def test_bad_header_fails_file(dirs) -> None:
    src, out = dirs
    path = src / "ESZ20.scid"
    path.write_bytes(b"SCID\x38\x00")

    result = _pipeline(src, out).run(path)

    assert result.code is ReturnCode.IO_ERROR_READING_DATA
    assert list(out.iterdir()) == []


def test_missing_input_is_io_error(dirs) -> None:
    src, out = dirs
    result = _pipeline(src, out).run(src / "ESZ20.scid")
    assert result.code is ReturnCode.IO_ERROR_READING_DATA


def test_update_only_skips_existing_archive(dirs) -> None:
    src, out = dirs
    path = _write_z20(src)
    (out / "ESZ20.zip").write_bytes(b"existing")
    pipeline = _pipeline(src, out, update_only=True)

    result = pipeline.run(path)

    assert result.state is PipelineState.IGNORED
    assert result.code is ReturnCode.IGNORED
    assert (out / "ESZ20.zip").read_bytes() == b"existing"
    assert pipeline.log.exit_status == 0


def test_update_only_does_not_open_input(dirs) -> None:
    src, out = dirs
    (out / "ESZ20.zip").write_bytes(b"existing")

    # the input does not even exist: ignoring it must not touch the file
    result = _pipeline(src, out, update_only=True).run(src / "ESZ20.scid")

    assert result.state is PipelineState.IGNORED


def test_replace_mode_rewrites_archive(dirs) -> None:
    src, out = dirs
    path = _write_z20(src)
    (out / "ESZ20.zip").write_bytes(b"existing")

    result = _pipeline(src, out, update_only=False).run(path)

    assert result.state is PipelineState.SUCCEEDED
    assert _read_zip(out / "ESZ20.zip", "ESZ20.csv") == EXPECTED_CSV


def test_empty_file_produces_header_only(dirs) -> None:
    src, out = dirs
    path = write_scid_file(src, "ESH21.scid", [])

    result = _pipeline(src, out).run(path)

    assert result.rows == 0
    assert _read_zip(out / "ESH21.zip", "ESH21.csv") == ["DateTime,Close,BidVolume,AskVolume"]
