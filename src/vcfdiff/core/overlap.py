"""Resolution of the individuals shared by both input files."""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence

import numpy as np

from vcfdiff.exceptions import EmptyOverlapError

logger = logging.getLogger(__name__)


class SampleOverlap:
    """
    Ordered set of sample ids compared in a run.

    Each member carries its column index in file 1 and in file 2. The
    order follows file 1's header and never changes during a run.
    """

    def __init__(self, sample_ids: Sequence[str], index1: Sequence[int], index2: Sequence[int]):
        self.sample_ids = list(sample_ids)
        self.index1 = np.asarray(index1, dtype=np.intp)
        self.index2 = np.asarray(index2, dtype=np.intp)

    @classmethod
    def resolve(
        cls,
        samples1: Sequence[str],
        index2: Mapping[str, int],
        exclude: Iterable[str] = (),
    ) -> "SampleOverlap":
        """
        Intersect file 1's samples with file 2's, minus the exclusion set.

        Raises:
            EmptyOverlapError: when no individual is left to compare.
        """
        excluded = set(exclude)
        ids: list[str] = []
        idx1: list[int] = []
        idx2: list[int] = []
        for i, sample_id in enumerate(samples1):
            if sample_id in index2 and sample_id not in excluded:
                ids.append(sample_id)
                idx1.append(i)
                idx2.append(index2[sample_id])

        logger.info(
            "Identified %d overlapping individuals outside the exclusion list", len(ids)
        )
        if not ids:
            raise EmptyOverlapError("No individuals to analyze")
        return cls(ids, idx1, idx2)

    def __len__(self) -> int:
        return len(self.sample_ids)

    def __iter__(self) -> Iterator[tuple[str, int, int]]:
        for sample_id, i1, i2 in zip(self.sample_ids, self.index1, self.index2):
            yield sample_id, int(i1), int(i2)
