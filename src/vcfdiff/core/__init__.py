"""
Core module for vcfdiff.

Provides the site kernel, concordance counters, sample overlap resolution
and the dual-stream comparator.
"""

from .aggregate import ConcordanceAggregator, FrequencyBinner
from .comparator import Comparator, ComparisonStats, SiteClass
from .kernel import END_OF_STREAM, SiteKernel
from .matrix import ConcordanceMatrix
from .overlap import SampleOverlap

__all__ = [
    "END_OF_STREAM",
    "Comparator",
    "ComparisonStats",
    "ConcordanceAggregator",
    "ConcordanceMatrix",
    "FrequencyBinner",
    "SampleOverlap",
    "SiteClass",
    "SiteKernel",
]
