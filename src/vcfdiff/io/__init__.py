"""
I/O module for vcfdiff.

Provides the streaming VCF reader and the tab-separated table writers.
"""

from .input import PASSING_FILTERS, VcfReader
from .output import DiffWriter, TableWriter

__all__ = [
    "PASSING_FILTERS",
    "DiffWriter",
    "TableWriter",
    "VcfReader",
]
