"""
Comparator: walks two sorted VCF streams in lockstep and classifies sites.

At each step the records at the head of both streams are compared by
(chromosome, position):
- equal keys: candidate match, classified as "both" or "mismatch"
- file 1 first: the record exists only in file 1
- file 2 first: the record exists only in file 2

A matched site is a "mismatch" when any compared individual carries an
alternate allele and the two files disagree on ALT; only "both" sites
reach the aggregation counters.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import numpy as np

from vcfdiff.exceptions import UnsortedInputError
from vcfdiff.models.core import GenotypeCall, VariantRecord

from .aggregate import ConcordanceAggregator
from .kernel import END_OF_STREAM, SiteKey, SiteKernel
from .matrix import N_CALLS, ConcordanceMatrix
from .overlap import SampleOverlap

logger = logging.getLogger(__name__)


class SiteClass(str, Enum):
    """Outcome of one merge step."""

    BOTH = "both"
    MISMATCH = "mismatch"
    ONLY1 = "only1"
    ONLY2 = "only2"
    SUPPRESSED = "suppressed"


class SiteSink(Protocol):
    """Receives per-site rows as the merge proceeds."""

    def write_both(self, record: VariantRecord, site: ConcordanceMatrix) -> None: ...

    def write_mismatch(
        self, record1: VariantRecord, record2: VariantRecord, site: ConcordanceMatrix
    ) -> None: ...

    def write_only(self, which: int, record: VariantRecord, counts: np.ndarray) -> None: ...


@dataclass
class ComparisonStats:
    """Site tallies of a run."""

    n_both: int = 0
    n_mismatch: int = 0
    n_only1: int = 0
    n_only2: int = 0
    n_suppressed: int = 0
    n_ref_mismatch: int = 0
    n_monomorphic1: int = 0
    n_monomorphic2: int = 0


def should_flip(site: ConcordanceMatrix) -> bool:
    """
    True when mirrored homozygous pairs outnumber concordant ones.

    Compares (HOMREF,HOMREF)+(HOMALT,HOMALT) against
    (HOMREF,HOMALT)+(HOMALT,HOMREF).
    """
    ref, alt = GenotypeCall.HOMREF, GenotypeCall.HOMALT
    concordant = site.cell(ref, ref) + site.cell(alt, alt)
    mirrored = site.cell(ref, alt) + site.cell(alt, ref)
    return concordant < mirrored


def flip_homozygotes(genos: np.ndarray) -> np.ndarray:
    """Swap HOMREF and HOMALT codes; MISSING and HET are unchanged."""
    flipped = genos.copy()
    flipped[genos == GenotypeCall.HOMREF] = GenotypeCall.HOMALT
    flipped[genos == GenotypeCall.HOMALT] = GenotypeCall.HOMREF
    return flipped


class _Stream:
    """
    Head-of-stream cursor over one file's records.

    Keeps the overlap members' genotype codes for the current record and
    enforces non-decreasing site order.
    """

    def __init__(
        self,
        label: str,
        records: Iterable[VariantRecord],
        index: np.ndarray,
        include_monomorphic: bool,
    ):
        self.label = label
        self._records: Iterator[VariantRecord] = iter(records)
        self._index = index
        self._include_monomorphic = include_monomorphic
        self._last_key: SiteKey | None = None
        self.record: VariantRecord | None = None
        self.genos: np.ndarray | None = None
        self.skipped_monomorphic = 0

    @property
    def key(self) -> SiteKey:
        return END_OF_STREAM if self.record is None else self.record.key

    def advance(self) -> None:
        """Move to the next record, skipping monomorphic ones unless kept."""
        for record in self._records:
            if self._last_key is not None and record.key < self._last_key:
                raise UnsortedInputError(
                    f"{self.label} is not sorted: {record.chrom}:{record.pos} "
                    f"follows {self._last_key[0]}:{self._last_key[1]}"
                )
            self._last_key = record.key

            genos = record.genotypes[self._index]
            if self._include_monomorphic or bool(np.any(genos >= GenotypeCall.HET)):
                self.record = record
                self.genos = genos
                return
            self.skipped_monomorphic += 1

        self.record = None
        self.genos = None

    def genotype_counts(self) -> np.ndarray:
        return np.bincount(self.genos, minlength=N_CALLS)


class Comparator:
    """
    Single-pass concordance comparison of two record streams.

    Args:
        records1: Records of file 1, sorted by (chromosome, position).
        records2: Records of file 2, same ordering.
        overlap: Individuals to compare and their column indices.
        aggregator: Counters updated at every "both" site.
        sink: Optional receiver for per-site output rows.
        include_monomorphic: Keep records where no compared individual
            carries an alternate allele.
        flip: Enable the per-site HOMREF/HOMALT flip correction.
        min_ns: Suppress matches whose INFO NS is below this (0 disables).
    """

    def __init__(
        self,
        records1: Iterable[VariantRecord],
        records2: Iterable[VariantRecord],
        overlap: SampleOverlap,
        aggregator: ConcordanceAggregator,
        sink: SiteSink | None = None,
        include_monomorphic: bool = False,
        flip: bool = False,
        min_ns: int = 0,
        labels: tuple[str, str] = ("vcf1", "vcf2"),
    ):
        self.overlap = overlap
        self.aggregator = aggregator
        self.sink = sink
        self.flip = flip
        self.min_ns = min_ns
        self.stats = ComparisonStats()
        self._s1 = _Stream(labels[0], records1, overlap.index1, include_monomorphic)
        self._s2 = _Stream(labels[1], records2, overlap.index2, include_monomorphic)

    def run(self) -> ComparisonStats:
        s1, s2 = self._s1, self._s2
        s1.advance()
        s2.advance()

        while s1.record is not None or s2.record is not None:
            k1, k2 = s1.key, s2.key
            if k1 == k2:
                self.compare_site(s1.record, s1.genos, s2.record, s2.genos)
                s1.advance()
                s2.advance()
            elif k1 < k2:
                self.stats.n_only1 += 1
                if self.sink is not None:
                    self.sink.write_only(1, s1.record, s1.genotype_counts())
                s1.advance()
            else:
                self.stats.n_only2 += 1
                if self.sink is not None:
                    self.sink.write_only(2, s2.record, s2.genotype_counts())
                s2.advance()

        self.stats.n_monomorphic1 = s1.skipped_monomorphic
        self.stats.n_monomorphic2 = s2.skipped_monomorphic
        logger.debug("Comparison finished: %s", self.stats)
        return self.stats

    def compare_site(
        self,
        record1: VariantRecord,
        genos1: np.ndarray,
        record2: VariantRecord,
        genos2: np.ndarray,
    ) -> SiteClass:
        """Classify and count one candidate match."""
        if self.min_ns and self._below_min_ns(record1, record2):
            self.stats.n_suppressed += 1
            return SiteClass.SUPPRESSED

        alt_observed = bool(
            np.any(genos1 >= GenotypeCall.HET) or np.any(genos2 >= GenotypeCall.HET)
        )
        if self.flip and should_flip(ConcordanceMatrix.from_genotypes(genos1, genos2)):
            genos1 = flip_homozygotes(genos1)

        if record1.ref != record2.ref:
            self.stats.n_ref_mismatch += 1
            logger.warning(
                "Reference bases mismatch at %d:%d (%s-%s)",
                record1.chrom,
                record1.pos,
                record1.ref,
                record2.ref,
            )

        if alt_observed and record1.alt != record2.alt:
            site = ConcordanceMatrix.from_genotypes(genos1, genos2)
            self.stats.n_mismatch += 1
            if self.sink is not None:
                self.sink.write_mismatch(record1, record2, site)
            return SiteClass.MISMATCH

        index2 = self.overlap.index2
        gqs = None
        if self.aggregator.by_gq:
            gqs = SiteKernel.format_ints(record2.format, record2.entries, "GQ", index2)
        depths = None
        if "DP" in record2.format.split(":"):
            depths = SiteKernel.format_ints(record2.format, record2.entries, "DP", index2)

        site = self.aggregator.add_site(genos1, genos2, record1.info, gqs, depths)
        self.stats.n_both += 1
        if self.sink is not None:
            self.sink.write_both(record1, site)
        return SiteClass.BOTH

    def _below_min_ns(self, record1: VariantRecord, record2: VariantRecord) -> bool:
        for record in (record1, record2):
            ns = SiteKernel.info_int(record.info, "NS")
            if ns is not None and ns < self.min_ns:
                return True
        return False
