"""
Data models for txmap.

Provides Pydantic models for input ranges, annotation views and mapping results.
"""

from .core import (
    Exon,
    GenomicMappedRange,
    GenomicRange,
    GroupedTargets,
    IdType,
    Interval,
    MappedRange,
    ProteinGenomeResult,
    SingleTarget,
    Strand,
    TranscriptInfo,
)

__all__ = [
    "Exon",
    "GenomicMappedRange",
    "GenomicRange",
    "GroupedTargets",
    "IdType",
    "Interval",
    "MappedRange",
    "ProteinGenomeResult",
    "SingleTarget",
    "Strand",
    "TranscriptInfo",
]
