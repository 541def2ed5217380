"""Lightweight utility to inspect Sierra Chart .scid files."""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import List, Optional, Sequence

from scidzip.errors import IOErrorReadingData
from scidzip.parser.scid_format import peek_range
from scidzip.parser.timeconv import TimeConverter

_UTC = TimeConverter("UTC")


def _iso(raw: Optional[int]) -> Optional[str]:
    if raw is None:
        return None
    try:
        return _UTC.to_local(raw).isoformat()
    except ValueError:
        # corrupt timestamp; the raw value is still reported
        return None


def _peek_file(path: Path) -> dict:
    entry: dict = {"path": str(path)}
    if not path.exists():
        entry["error"] = "not found"
        return entry

    try:
        header, n, first, last = peek_range(path)
    except (IOErrorReadingData, OSError) as exc:
        entry["error"] = str(exc)
        return entry

    entry.update({
        "version": header.version,
        "header_size": header.header_size,
        "count": n,
        "start": first,
        "end": last,
        "start_utc": _iso(first),
        "end_utc": _iso(last),
    })
    return entry


def _gather_paths(root: Path, pattern: Optional[str]) -> Sequence[Path]:
    if root.is_dir():
        glob = pattern or "*.scid"
        return sorted(root.glob(glob))
    return [root]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Peek at SCID headers and timestamp ranges")
    parser.add_argument("path", help="Path to a .scid file or directory")
    parser.add_argument("--glob", help="Glob when path is a directory")
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    args = parser.parse_args(argv)

    targets = _gather_paths(Path(args.path), args.glob)

    results: List[dict] = [_peek_file(path) for path in targets]

    if args.json:
        payload = results[0] if len(results) == 1 else results
        print(json.dumps(payload))
    else:
        for result in results:
            if "error" in result:
                print(f"{result['path']}: error={result['error']}")
            else:
                print(
                    f"{result['path']}: version={result['version']} count={result['count']} "
                    f"start={result['start_utc']} end={result['end_utc']}"
                )

    return 1 if any("error" in r for r in results) else 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
