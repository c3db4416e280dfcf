"""
I/O module for txmap.

Provides readers for mapping batches and a writer for result groups (TSV).
"""

from .input import GenomicRangeReader, IdRangeReader, RangeReader
from .output import ResultWriter

__all__ = [
    "GenomicRangeReader",
    "IdRangeReader",
    "RangeReader",
    "ResultWriter",
]
