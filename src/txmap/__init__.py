"""
txmap - coordinate mapping between genome, transcript, CDS and protein.

This package provides a Python API and a command-line interface for mapping
positions and ranges across the nested coordinate systems of a gene model,
backed by any annotation store implementing ``AnnotationStore``.

Example usage:
    $ txmap transcript-to-genome -a annotation.json -i ranges.tsv
"""

__version__ = "1.0.0"

from .config import MapperConfig
from .errors import AnnotationSnapshotError, StructuralInputError, TxmapError
from .mapper import Mapper
from .models.core import (
    GenomicMappedRange,
    GenomicRange,
    GroupedTargets,
    IdType,
    Interval,
    MappedRange,
    ProteinGenomeResult,
    SingleTarget,
    Strand,
)
from .store import AnnotationStore, InMemoryAnnotationStore, TranscriptRecord

__all__ = [
    "__version__",
    "AnnotationSnapshotError",
    "AnnotationStore",
    "GenomicMappedRange",
    "GenomicRange",
    "GroupedTargets",
    "IdType",
    "InMemoryAnnotationStore",
    "Interval",
    "MappedRange",
    "Mapper",
    "MapperConfig",
    "ProteinGenomeResult",
    "SingleTarget",
    "Strand",
    "StructuralInputError",
    "TranscriptRecord",
    "TxmapError",
]
