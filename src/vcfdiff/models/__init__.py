"""
Data models for vcfdiff.

Provides the genotype code, the per-line variant record and the Pydantic
run configuration models.
"""

from .core import DEFAULT_FREQ_CUTS, DiffConfig, GenotypeCall, SummaryConfig, VariantRecord

__all__ = [
    "DEFAULT_FREQ_CUTS",
    "DiffConfig",
    "GenotypeCall",
    "SummaryConfig",
    "VariantRecord",
]
