"""
Concordance aggregation across the stratification dimensions of a run.

Every "both" site contributes once per compared individual to:
- the overall matrix
- that individual's matrix
- the frequency bucket of the site (optional)
- the GQ bucket of the individual's call in file 2 (optional)
- a joint table keyed by the enabled dimensions (optional)
"""

import bisect
import logging
from collections.abc import Sequence

import numpy as np

from .kernel import SiteKernel
from .matrix import N_CALLS, N_CELLS, ConcordanceMatrix

logger = logging.getLogger(__name__)

MAX_GQ = 100
NOT_AVAILABLE = "NA"

JointKey = tuple[str | int, ...]


class FrequencyBinner:
    """
    Maps an allele frequency to a bucket index.

    Frequencies are folded to the minor allele first; the bucket is the
    position of the first cutoff the folded value does not exceed, or
    ``len(cuts)`` when it exceeds every cutoff.
    """

    def __init__(self, cuts: Sequence[float]):
        self.cuts = sorted(set(cuts))

    def __len__(self) -> int:
        return len(self.cuts) + 1

    def categorize(self, af: float) -> tuple[int, str]:
        """Return (bucket, "maj"|"min"); "min" means REF is the minor allele."""
        if af > 0.5:
            af = 1.0 - af
            ref_flag = "min"
        else:
            ref_flag = "maj"
        return bisect.bisect_left(self.cuts, af), ref_flag

    def categorize_info(self, info: str) -> tuple[int | None, str | None]:
        """Bucket of the first INFO AF value; sites with no AF or AF=0 are not binned."""
        af = SiteKernel.info_float(info, "AF")
        if not af:
            return None, None
        return self.categorize(af)


class ConcordanceAggregator:
    """
    Owns every counter of a comparison run.

    Args:
        sample_ids: Overlap members, in output order.
        binner: Enables the frequency buckets when given.
        by_gq: Enables the GQ buckets.
        joint: Enables the joint table.
    """

    def __init__(
        self,
        sample_ids: Sequence[str],
        binner: FrequencyBinner | None = None,
        by_gq: bool = False,
        joint: bool = False,
    ):
        n = len(sample_ids)
        self.sample_ids = list(sample_ids)
        self.binner = binner
        self.by_gq = by_gq
        self.joint_enabled = joint

        self.overall = ConcordanceMatrix()
        self.individual_counts = np.zeros((n, N_CELLS), dtype=np.int64)
        self.frequency_counts = (
            np.zeros((len(binner), N_CELLS), dtype=np.int64) if binner is not None else None
        )
        self.gq_counts = np.zeros((MAX_GQ + 1, N_CELLS), dtype=np.int64) if by_gq else None
        self.joint: dict[JointKey, ConcordanceMatrix] = {}

        self.depth_sums = np.zeros(n, dtype=np.float64)
        self.n_sites = 0

    @property
    def joint_dimensions(self) -> list[str]:
        dims = ["ind"]
        if self.binner is not None:
            dims.extend(["af", "ref"])
        if self.by_gq:
            dims.append("gq")
        return dims

    def individual(self, i: int) -> ConcordanceMatrix:
        return ConcordanceMatrix(self.individual_counts[i])

    def frequency(self, category: int) -> ConcordanceMatrix:
        if self.frequency_counts is None:
            raise ValueError("Frequency stratification is not enabled")
        return ConcordanceMatrix(self.frequency_counts[category])

    def gq(self, value: int) -> ConcordanceMatrix:
        if self.gq_counts is None:
            raise ValueError("GQ stratification is not enabled")
        return ConcordanceMatrix(self.gq_counts[value])

    def average_depths(self) -> np.ndarray:
        if self.n_sites == 0:
            return np.zeros_like(self.depth_sums)
        return self.depth_sums / self.n_sites

    def add_site(
        self,
        genos1: np.ndarray,
        genos2: np.ndarray,
        info1: str = ".",
        gqs: Sequence[int | None] | None = None,
        depths: Sequence[int | None] | None = None,
    ) -> ConcordanceMatrix:
        """
        Count one matched site.

        ``genos1``/``genos2`` are the overlap members' codes in file 1 and
        file 2; ``gqs`` and ``depths`` are file 2 FORMAT values per member.
        Returns the site's own matrix.
        """
        cells = genos1.astype(np.int64) * N_CALLS + genos2.astype(np.int64)
        site = ConcordanceMatrix(np.bincount(cells, minlength=N_CELLS).astype(np.int64))

        self.n_sites += 1
        self.overall.add(site)
        self.individual_counts[np.arange(len(cells)), cells] += 1

        if depths is not None:
            self.depth_sums += np.array([d or 0 for d in depths], dtype=np.float64)

        category: int | None = None
        ref_flag: str | None = None
        if self.binner is not None:
            category, ref_flag = self.binner.categorize_info(info1)
            if category is not None:
                self.frequency_counts[category] += site.counts

        gq_values: np.ndarray | None = None
        if self.by_gq and gqs is not None:
            gq_values = np.array([-1 if g is None else g for g in gqs], dtype=np.int64)
            valid = gq_values >= 0
            np.add.at(
                self.gq_counts,
                (np.minimum(gq_values[valid], MAX_GQ), cells[valid]),
                1,
            )

        if self.joint_enabled:
            for i, sample_id in enumerate(self.sample_ids):
                key: list[str | int] = [sample_id]
                if self.binner is not None:
                    key.append(NOT_AVAILABLE if category is None else category)
                    key.append(NOT_AVAILABLE if ref_flag is None else ref_flag)
                if self.by_gq:
                    if gq_values is None or gq_values[i] < 0:
                        key.append(NOT_AVAILABLE)
                    else:
                        key.append(int(min(gq_values[i], MAX_GQ)) // 10)
                self._joint_matrix(tuple(key)).counts[cells[i]] += 1

        return site

    def _joint_matrix(self, key: JointKey) -> ConcordanceMatrix:
        matrix = self.joint.get(key)
        if matrix is None:
            matrix = self.joint[key] = ConcordanceMatrix()
        return matrix
