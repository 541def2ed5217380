"""Per-file SCID to zipped CSV conversion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd

from ..calendar.holidays import HolidayCalendar
from ..calendar.sessions import SessionFilter
from ..config import ConverterConfig
from ..errors import IOErrorReadingData, ReturnCode, ScidConvertError
from ..parser.contracts import ContractWindow, ScidContractInfo, parse_contract_filename
from ..parser.scid_format import iter_record_chunks, read_header
from ..parser.timeconv import TimeConverter
from .archive import TIMESTAMP_FORMAT, VALUE_COLUMNS, ArchiveWriter
from .dedup import TickDeduplicator, wall_seconds
from .runlog import RunLog

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    VALIDATING_FILENAME = "validating_filename"
    DECODING_HEADER = "decoding_header"
    STREAMING_RECORDS = "streaming_records"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    IGNORED = "ignored"
    FAILED = "failed"


class OutputRow(NamedTuple):
    timestamp: str
    close: float
    bid_volume: int
    ask_volume: int


@dataclass(frozen=True)
class ConversionResult:
    """Final outcome of :meth:`ConversionPipeline.run` for one input file."""

    path: Path
    state: PipelineState
    code: ReturnCode
    message: str
    rows: int = 0
    output_path: Optional[Path] = None


class ConversionPipeline:
    """Convert one SCID file at a time into a zipped CSV of filtered ticks.

    The instance holds only read-only collaborators (config, holiday calendar,
    time converter) plus the thread-safe :class:`RunLog`, so a single pipeline
    can serve every worker of a batch.
    """

    def __init__(
        self,
        config: ConverterConfig,
        calendar: Optional[HolidayCalendar] = None,
        log: Optional[RunLog] = None,
        *,
        converter: Optional[TimeConverter] = None,
    ):
        self.config = config
        self.calendar = calendar if calendar is not None else HolidayCalendar()
        self.log = log if log is not None else RunLog()
        self.converter = converter or TimeConverter(config.timezone)
        self.sessions = SessionFilter(self.calendar)

    @property
    def columns(self) -> Tuple[str, ...]:
        return (self.config.timestamp_label,) + VALUE_COLUMNS

    def output_path_for(self, info: ScidContractInfo) -> Path:
        return self.config.output_dir / f"{info.stem}.zip"

    # --------------------------------- driver ----------------------------------
    def run(self, path: Path) -> ConversionResult:
        """Convert ``path`` and record the outcome in the run log.

        Errors are confined to this file: malformed names and unreadable data
        become a ``FAILED`` result rather than an exception.
        """
        path = Path(path)
        state = PipelineState.VALIDATING_FILENAME
        try:
            info = parse_contract_filename(path, self.config.symbol_root)
            out_path = self.output_path_for(info)

            if self.config.update_only and out_path.exists():
                message = f"Update only mode; file ignored: {path}"
                self.log.record(ReturnCode.IGNORED, message)
                return ConversionResult(path, PipelineState.IGNORED, ReturnCode.IGNORED, message, output_path=out_path)

            logger.info("Processing %s", path)
            state = PipelineState.DECODING_HEADER
            with path.open("rb") as fh:
                read_header(fh)
                window = info.window
                state = PipelineState.STREAMING_RECORDS
                with ArchiveWriter(out_path, f"{info.stem}.csv", columns=self.columns) as writer:
                    for frame in self.convert_stream(fh, window):
                        writer.write_rows(frame)
                    state = PipelineState.FINALIZING
                rows = writer.rows_written
        except ScidConvertError as exc:
            return self._fail(path, state, exc.code, str(exc))
        except OSError as exc:
            return self._fail(path, state, IOErrorReadingData.code, f"IO Error: {path}: {exc}")

        message = f"{out_path} created."
        self.log.record(ReturnCode.SUCCESSFUL, message)
        return ConversionResult(path, PipelineState.SUCCEEDED, ReturnCode.SUCCESSFUL, message, rows, out_path)

    def _fail(self, path: Path, state: PipelineState, code: ReturnCode, message: str) -> ConversionResult:
        logger.debug("%s failed while %s", path, state.value)
        self.log.record(code, message)
        return ConversionResult(path, PipelineState.FAILED, code, message)

    # ------------------------------ record stream ------------------------------
    def convert_stream(self, stream: BinaryIO, window: ContractWindow) -> Iterator[pd.DataFrame]:
        """Yield output frames for the records remaining in ``stream``.

        ``stream`` must be positioned after the header. Each frame has the
        :attr:`columns` of the CSV output, in file order.
        """
        start, end = window.bounds(self.converter)
        dedup = TickDeduplicator()

        for chunk in iter_record_chunks(stream, chunk_records=self.config.chunk_records):
            frame, done = self._filter_chunk(chunk, start, end, dedup)
            if not frame.empty:
                yield frame
            if done:
                return

    def iter_rows(self, stream: BinaryIO, window: ContractWindow) -> Iterator[OutputRow]:
        for frame in self.convert_stream(stream, window):
            for values in frame.itertuples(index=False, name=None):
                yield OutputRow(*values)

    def _filter_chunk(
        self,
        chunk: np.ndarray,
        start: pd.Timestamp,
        end: pd.Timestamp,
        dedup: TickDeduplicator,
    ) -> Tuple[pd.DataFrame, bool]:
        try:
            local = self.converter.to_local_index(chunk["DateTime"])
        except ValueError as exc:
            raise IOErrorReadingData(f"Invalid record timestamp: {exc}") from exc

        # records are time ordered: nothing after the first one past the window is kept
        past_end = np.flatnonzero(np.asarray(local >= end))
        done = past_end.size > 0
        if done:
            cut = int(past_end[0])
            chunk = chunk[:cut]
            local = local[:cut]

        keep = np.asarray(local >= start) & self.sessions.mask(local)
        selected = np.flatnonzero(keep)
        selected = selected[dedup.first_in_second(wall_seconds(local[selected]))]

        kept = chunk[selected]
        frame = pd.DataFrame({
            self.config.timestamp_label: local[selected].strftime(TIMESTAMP_FORMAT),
            "Close": kept["Close"],
            "BidVolume": kept["BidVolume"],
            "AskVolume": kept["AskVolume"],
        })
        return frame, done
