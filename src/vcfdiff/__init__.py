"""
vcfdiff - genotype concordance between two VCF files.

This package provides a command-line interface and Python API for comparing
the genotype calls of the individuals shared by two sorted VCF files in a
single streaming pass.

Example usage:
    $ vcfdiff diff --vcf1 chip.vcf.gz --vcf2 seq.vcf.gz --out results/chip_vs_seq --freq --gq
"""

__version__ = "1.0.0"

from .core.matrix import ConcordanceMatrix
from .models.core import DiffConfig, GenotypeCall, VariantRecord
from .pipeline import Pipeline

__all__ = [
    "__version__",
    "ConcordanceMatrix",
    "DiffConfig",
    "GenotypeCall",
    "Pipeline",
    "VariantRecord",
]
