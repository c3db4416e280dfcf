"""
Internal tagged outcome of a single mapping step.

Kernel functions return either their mapped value or an ``Unmapped`` marker.
The mapper later encodes ``Unmapped`` as a sentinel range or as an empty
collection, depending on the operation.
"""

from dataclasses import dataclass
from enum import Enum


class UnmappedReason(str, Enum):
    UNKNOWN_IDENTIFIER = "unknown identifier"
    OUT_OF_BOUNDS = "out of bounds"
    NON_CODING = "non-coding transcript"
    NO_OVERLAP = "no overlapping exon"


@dataclass(frozen=True)
class Unmapped:
    reason: UnmappedReason
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.reason.value}: {self.detail}"
        return self.reason.value
