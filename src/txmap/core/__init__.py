"""
Core module for txmap.

Provides the coordinate transformation kernel and the internal mapping outcome.
"""

from .kernel import CODON_SIZE, CoordinateKernel
from .outcome import Unmapped, UnmappedReason

__all__ = ["CODON_SIZE", "CoordinateKernel", "Unmapped", "UnmappedReason"]
