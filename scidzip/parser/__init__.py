"""
Parser module for Sierra Chart intraday data files.

Binary SCID codec, SCDateTime conversion and contract file names.
"""

from .scid_format import (
    DTYPE_TICK_RECORD,
    RECORD_SIZE,
    SCID_MAGIC,
    FileHeader,
    TickRecord,
    iter_record_chunks,
    iter_records,
    pack_header,
    pack_record,
    peek_range,
    read_header,
)
from .timeconv import TimeConverter
from .contracts import (
    MONTH_CODE_MAP,
    ContractWindow,
    ScidContractInfo,
    parse_contract_filename,
    resolve_contract_window,
)

__all__ = [
    # SCID codec
    "DTYPE_TICK_RECORD",
    "RECORD_SIZE",
    "SCID_MAGIC",
    "FileHeader",
    "TickRecord",
    "iter_record_chunks",
    "iter_records",
    "pack_header",
    "pack_record",
    "peek_range",
    "read_header",

    # Time
    "TimeConverter",

    # Contracts
    "MONTH_CODE_MAP",
    "ContractWindow",
    "ScidContractInfo",
    "parse_contract_filename",
    "resolve_contract_window",
]
