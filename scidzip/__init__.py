"""
scidzip - Convert Sierra Chart intraday (.scid) tick files into zipped CSVs.

For each futures contract file the converter:
- decodes the SCID header and tick records with an explicit-offset codec
- projects SCDateTime timestamps into the exchange timezone
- keeps the contract's active window and regular trading sessions
- emits one row per second of local time into ``<contract>.zip``
"""

__version__ = "0.1.0"

from .calendar import HolidayCalendar, SessionFilter
from .config import ConverterConfig
from .errors import (
    HolidayFileInvalid,
    IOErrorReadingData,
    MalformedFuturesFileName,
    ReturnCode,
    ScidConvertError,
)
from .parser import (
    ContractWindow,
    FileHeader,
    ScidContractInfo,
    TickRecord,
    TimeConverter,
    parse_contract_filename,
    resolve_contract_window,
)
from .pipeline import ConversionPipeline, ConversionResult, RunLog, TickDeduplicator, run_batch

__all__ = [
    # Version info
    "__version__",

    # Configuration and errors
    "ConverterConfig",
    "ReturnCode",
    "ScidConvertError",
    "MalformedFuturesFileName",
    "IOErrorReadingData",
    "HolidayFileInvalid",

    # Parsing
    "FileHeader",
    "TickRecord",
    "TimeConverter",
    "ContractWindow",
    "ScidContractInfo",
    "parse_contract_filename",
    "resolve_contract_window",

    # Sessions
    "HolidayCalendar",
    "SessionFilter",

    # Pipeline
    "TickDeduplicator",
    "ConversionPipeline",
    "ConversionResult",
    "RunLog",
    "run_batch",
]
