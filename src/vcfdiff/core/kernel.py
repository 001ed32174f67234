"""
Site Kernel: the source of truth for chromosome ordering and genotype codes.

Handles:
- Chromosome names -> integers (1-22, X=23, Y=24, XY=25, MT=26)
- (chromosome, position) sort keys, including the end-of-stream sentinel
- Genotype tokens -> GenotypeCall
- INFO and FORMAT field lookups

Only autosomes (1-22) take part in a comparison; everything else is
consumed from the stream and dropped.
"""

import re
import sys
from collections.abc import Sequence

from vcfdiff.models.core import GenotypeCall

SiteKey = tuple[int, int]

# Sorts after every real (chromosome, position) key.
END_OF_STREAM: SiteKey = (sys.maxsize, sys.maxsize)

SEX_CHROMOSOMES = {"X": 23, "Y": 24, "XY": 25, "MT": 26, "M": 26}
MAX_AUTOSOME = 22

_MISSING_GT = re.compile(r"^(?:\.(?:[|/][.\d]|:|$)|\d+[|/]\.)")
_CALLED_GT = re.compile(r"^(\d+)[|/](\d+)")


class SiteKernel:
    """
    Stateless helpers shared by the reader and the comparator.
    """

    @staticmethod
    def normalize_chromosome(chrom: str) -> int | None:
        """
        Map a chromosome name to its integer code.

        Returns None for names that are neither numeric nor one of the
        recognized sex/mitochondrial names (e.g. unplaced contigs).
        """
        if chrom.lower().startswith("chr"):
            chrom = chrom[3:]
        upper = chrom.upper()
        if upper in SEX_CHROMOSOMES:
            return SEX_CHROMOSOMES[upper]
        try:
            value = int(chrom)
        except ValueError:
            return None
        return value if value > 0 else None

    @staticmethod
    def is_autosome(chrom: int | None) -> bool:
        return chrom is not None and 1 <= chrom <= MAX_AUTOSOME

    @staticmethod
    def classify_genotype(token: str) -> GenotypeCall:
        """
        Classify a per-sample entry (GT first) into a GenotypeCall.

        Any allele index above 1 counts as the alternate allele, so "2/1"
        is HOMALT. Raises ValueError for tokens that are not
        ``allele[|/]allele`` or a missing call.
        """
        if _MISSING_GT.match(token):
            return GenotypeCall.MISSING
        match = _CALLED_GT.match(token)
        if match is None:
            raise ValueError(f"Unrecognized genotype token: {token}")
        a1 = min(int(match.group(1)), 1)
        a2 = min(int(match.group(2)), 1)
        return GenotypeCall(a1 + a2 + 1)

    @staticmethod
    def parse_info(info: str) -> dict[str, str]:
        """Split an INFO string into key/value pairs; flags map to "1"."""
        values: dict[str, str] = {}
        if info in ("", "."):
            return values
        for item in info.split(";"):
            key, _, value = item.partition("=")
            values[key] = value or "1"
        return values

    @staticmethod
    def info_int(info: str, key: str) -> int | None:
        raw = SiteKernel.parse_info(info).get(key)
        if raw is None:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    @staticmethod
    def info_float(info: str, key: str) -> float | None:
        """First value of a (possibly comma separated) numeric INFO field."""
        raw = SiteKernel.parse_info(info).get(key)
        if raw is None:
            return None
        try:
            return float(raw.split(",")[0])
        except ValueError:
            return None

    @staticmethod
    def format_values(
        fmt: str, entries: Sequence[str], key: str, indices: Sequence[int]
    ) -> list[str | None]:
        """
        Look up one FORMAT field for the given sample columns.

        Returns None for a sample when the field is not declared in FORMAT
        or is absent from that sample's entry.
        """
        keys = fmt.split(":")
        if key not in keys:
            return [None] * len(indices)
        pos = keys.index(key)
        values: list[str | None] = []
        for i in indices:
            parts = entries[i].split(":")
            values.append(parts[pos] if pos < len(parts) else None)
        return values

    @staticmethod
    def format_ints(
        fmt: str, entries: Sequence[str], key: str, indices: Sequence[int]
    ) -> list[int | None]:
        """Integer variant of format_values; unparseable values become None."""
        result: list[int | None] = []
        for raw in SiteKernel.format_values(fmt, entries, key, indices):
            try:
                result.append(int(float(raw)) if raw is not None else None)
            except (ValueError, OverflowError):
                result.append(None)
        return result
