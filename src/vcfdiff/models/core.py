"""
Core data models for vcfdiff.
"""

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

import numpy as np
from pydantic import BaseModel, Field, field_validator

DEFAULT_FREQ_CUTS = (0.01, 0.05, 0.15, 0.25)


class GenotypeCall(IntEnum):
    """Simplified four-state genotype used for concordance counting."""

    MISSING = 0
    HOMREF = 1
    HET = 2
    HOMALT = 3


@dataclass(frozen=True, eq=False)
class VariantRecord:
    """
    One data line of a VCF file.

    ``chrom`` is the normalized integer chromosome (1-22 for records that
    reach the comparator). ``genotypes`` holds one GenotypeCall code per
    sample column, in header order; ``entries`` keeps the raw sample
    strings so FORMAT fields such as GQ and DP can be looked up later.
    """

    chrom: int
    pos: int
    id: str
    ref: str
    alt: str
    qual: str
    filter: str
    info: str
    format: str
    genotypes: np.ndarray
    entries: tuple[str, ...]

    @property
    def key(self) -> tuple[int, int]:
        return (self.chrom, self.pos)

    @property
    def fixed_fields(self) -> list[str]:
        """The eight fixed VCF columns as written to output tables."""
        return [
            str(self.chrom),
            str(self.pos),
            self.id,
            self.ref,
            self.alt,
            self.qual,
            self.filter,
            self.info,
        ]


class DiffConfig(BaseModel):
    """
    Options for one comparison run.
    """

    # Input
    vcf1: Path
    vcf2: Path

    # Output
    out_prefix: Path
    write_only1: bool = False
    write_only2: bool = False
    write_freq: bool = False
    write_gq: bool = False
    write_joint: bool = False

    # Site selection
    pass_only: bool = False
    include_monomorphic: bool = False
    min_ns: int = Field(default=0, ge=0)
    exclude_ids: list[str] = Field(default_factory=list)

    # Classification
    flip: bool = False
    freq_cuts: list[float] = Field(default_factory=lambda: list(DEFAULT_FREQ_CUTS))

    @field_validator("vcf1", "vcf2")
    @classmethod
    def validate_file_exists(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Cannot open VCF file {v}")
        return v

    @field_validator("out_prefix")
    @classmethod
    def validate_out_prefix(cls, v: Path) -> Path:
        parent = v.parent
        if parent.exists() and not parent.is_dir():
            raise ValueError(f"Output directory is a file: {parent}")
        return v

    @field_validator("freq_cuts")
    @classmethod
    def validate_freq_cuts(cls, v: list[float]) -> list[float]:
        if not v:
            raise ValueError("At least one frequency cutoff is required")
        for cut in v:
            if not 0.0 <= cut <= 1.0:
                raise ValueError(f"Frequency cutoff out of range [0, 1]: {cut}")
        return sorted(set(v))

    def output_path(self, suffix: str) -> Path:
        return self.out_prefix.with_name(f"{self.out_prefix.name}.{suffix}")


class SummaryConfig(BaseModel):
    """Options for summarizing the tables written by a previous run."""

    out_prefix: Path
    order_file: Path | None = None
    depth_order: bool = False

    @field_validator("order_file")
    @classmethod
    def validate_order_file(cls, v: Path | None) -> Path | None:
        if v is not None and not v.exists():
            raise ValueError(f"Cannot open file {v}")
        return v

    def output_path(self, suffix: str) -> Path:
        return self.out_prefix.with_name(f"{self.out_prefix.name}.{suffix}")
