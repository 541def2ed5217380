"""Command line entry point: convert a directory of SCID files to zipped CSVs."""

from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Optional, Sequence

from . import __version__
from .calendar.holidays import HolidayCalendar
from .config import DEFAULT_SYMBOL_ROOT, DEFAULT_TIMEZONE, ConverterConfig
from .errors import HolidayFileInvalid
from .pipeline.batch import run_batch
from .pipeline.runlog import LOG_FILENAME, RunLog

logger = logging.getLogger(__name__)

EXIT_STARTUP_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="scidzip",
        description="Convert Sierra Chart .scid files into compressed zip files with 3 months data.",
    )
    ap.add_argument("input_dir", type=Path, help="Directory holding .scid files")
    ap.add_argument("output_dir", type=Path, help="Directory receiving .zip files and the run log")
    ap.add_argument("-v", "--version", action="version", version=f"scidzip {__version__}")
    ap.add_argument("-s", "--symbol", default=DEFAULT_SYMBOL_ROOT,
                    help="Futures contract symbol; i.e. for CME SP500 e-mini: ES")
    ap.add_argument("-r", "--replace", action="store_true",
                    help="Reprocess files even if their zip already exists in the output directory")
    ap.add_argument("--holidays", type=Path, default=None, help="File of holiday dates, one YYYY-MM-DD per line")
    ap.add_argument("--tz", default=DEFAULT_TIMEZONE, help="Exchange timezone (IANA name)")
    ap.add_argument("-j", "--workers", type=int, default=None, help="Worker threads (default: CPU count)")
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Console script entry point for the ``scidzip`` command."""
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
    )

    overrides = {} if args.workers is None else {"max_workers": args.workers}
    try:
        config = ConverterConfig(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            symbol_root=args.symbol,
            update_only=not args.replace,
            holidays_path=args.holidays,
            timezone=args.tz,
            **overrides,
        ).validate()
    except ValueError as exc:
        ap.error(str(exc))

    try:
        calendar = HolidayCalendar.from_file(config.holidays_path) if config.holidays_path else HolidayCalendar()
    except HolidayFileInvalid as exc:
        logger.error("Invalid holiday file: %s", exc)
        return EXIT_STARTUP_ERROR

    started = time.perf_counter()
    config.output_dir.mkdir(parents=True, exist_ok=True)
    with RunLog(config.output_dir / LOG_FILENAME) as log:
        run_batch(config, calendar, log)
    print(f"Elapsed time = {time.perf_counter() - started:.3f}s")

    return log.exit_status


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
