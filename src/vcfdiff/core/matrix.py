"""
Concordance matrix: a 4x4 contingency table over genotype codes.

Cells are stored flat, indexed by ``g1 * 4 + g2`` where g1 is the call in
the first file and g2 the call in the second. This is also the column
order of every counter block written to disk.
"""

from collections.abc import Iterable

import numpy as np

from vcfdiff.models.core import GenotypeCall

N_CALLS = len(GenotypeCall)
N_CELLS = N_CALLS * N_CALLS


def cell_index(g1: int, g2: int) -> int:
    return int(g1) * N_CALLS + int(g2)


class ConcordanceMatrix:
    """16 monotonically increasing counters."""

    __slots__ = ("counts",)

    def __init__(self, counts: np.ndarray | None = None):
        if counts is None:
            counts = np.zeros(N_CELLS, dtype=np.int64)
        self.counts = counts

    @classmethod
    def from_genotypes(cls, genos1: np.ndarray, genos2: np.ndarray) -> "ConcordanceMatrix":
        """Tabulate paired genotype vectors of equal length."""
        cells = genos1.astype(np.int64) * N_CALLS + genos2.astype(np.int64)
        return cls(np.bincount(cells, minlength=N_CELLS).astype(np.int64))

    def increment(self, g1: int, g2: int, n: int = 1) -> None:
        self.counts[cell_index(g1, g2)] += n

    def add(self, other: "ConcordanceMatrix") -> None:
        self.counts += other.counts

    def cell(self, g1: int, g2: int) -> int:
        return int(self.counts[cell_index(g1, g2)])

    def total(self) -> int:
        return int(self.counts.sum())

    def concordant(self) -> int:
        """Pairs where both files made the same non-missing call."""
        return sum(self.cell(g, g) for g in (GenotypeCall.HOMREF, GenotypeCall.HET, GenotypeCall.HOMALT))

    def as_fields(self) -> list[str]:
        return [str(int(c)) for c in self.counts]

    def copy(self) -> "ConcordanceMatrix":
        return ConcordanceMatrix(self.counts.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConcordanceMatrix):
            return NotImplemented
        return bool(np.array_equal(self.counts, other.counts))

    def __repr__(self) -> str:
        return f"ConcordanceMatrix({self.counts.tolist()})"

    @staticmethod
    def sum_of(matrices: Iterable["ConcordanceMatrix"]) -> "ConcordanceMatrix":
        total = ConcordanceMatrix()
        for m in matrices:
            total.add(m)
        return total
