"""Error taxonomy and per-file return codes."""

from __future__ import annotations

from enum import IntEnum


class ReturnCode(IntEnum):
    """Outcome of converting one file. Warnings are positive, errors negative."""

    SUCCESSFUL = 0
    IGNORED = 1
    MALFORMED_FUTURES_FILE_NAME = -1
    IO_ERROR_READING_DATA = -2

    @property
    def is_error(self) -> bool:
        return self < 0


class ScidConvertError(Exception):
    """Base class for conversion errors."""

    code: ReturnCode = ReturnCode.SUCCESSFUL


class MalformedFuturesFileName(ScidConvertError, ValueError):
    """File name does not match ``{root}{month code}{yy}``."""

    code = ReturnCode.MALFORMED_FUTURES_FILE_NAME


class IOErrorReadingData(ScidConvertError, IOError):
    """Truncated or corrupt SCID stream."""

    code = ReturnCode.IO_ERROR_READING_DATA


class HolidayFileInvalid(ScidConvertError, ValueError):
    """Holiday file is unparseable, out of order or has duplicates. Fatal."""
