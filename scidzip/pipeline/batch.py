"""Batch conversion of every matching SCID file in a directory."""

from __future__ import annotations

import concurrent.futures
import logging
from pathlib import Path
from typing import List, Optional

from ..calendar.holidays import HolidayCalendar
from ..config import ConverterConfig
from ..parser.timeconv import TimeConverter
from .convert import ConversionPipeline, ConversionResult
from .runlog import RunLog

logger = logging.getLogger(__name__)


def discover_files(config: ConverterConfig) -> List[Path]:
    """Return ``{symbol_root}*.scid`` files directly inside ``config.input_dir``, sorted."""
    if not config.input_dir.is_dir():
        return []
    pattern = f"{config.symbol_root}*.scid"
    return sorted(p for p in config.input_dir.glob(pattern) if p.is_file())


def run_batch(
    config: ConverterConfig,
    calendar: HolidayCalendar,
    log: RunLog,
    *,
    converter: Optional[TimeConverter] = None,
) -> List[ConversionResult]:
    """Convert all discovered files on a bounded thread pool.

    Each file is independent; a failed file is recorded in ``log`` and does
    not stop its siblings. Results are returned in file-name order.
    """
    files = discover_files(config)
    logger.info("Found %d %s files in %s", len(files), config.symbol_root, config.input_dir)
    if not files:
        return []

    config.output_dir.mkdir(parents=True, exist_ok=True)
    pipeline = ConversionPipeline(config, calendar, log, converter=converter)

    results: List[ConversionResult] = []
    with concurrent.futures.ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="scidzip") as pool:
        futures = {pool.submit(pipeline.run, path): path for path in files}
        for future in concurrent.futures.as_completed(futures):
            results.append(future.result())

    results.sort(key=lambda r: r.path.name)
    return results
