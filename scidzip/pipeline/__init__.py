from .dedup import TickDeduplicator
from .runlog import RunLog
from .archive import ArchiveWriter
from .convert import ConversionPipeline, ConversionResult, OutputRow, PipelineState
from .batch import discover_files, run_batch

__all__ = [
    "TickDeduplicator",
    "RunLog",
    "ArchiveWriter",
    "ConversionPipeline",
    "ConversionResult",
    "OutputRow",
    "PipelineState",
    "discover_files",
    "run_batch",
]
