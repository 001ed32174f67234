"""
Input Adapter: streaming VCF records.

The reader is line oriented: it reads the fixed columns,
the FORMAT column and the per-sample entries, and must accept minimal files
without contig or INFO declarations.
"""

import gzip
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import IO

import numpy as np

from ..core.kernel import SiteKernel
from ..exceptions import GenotypeParseError, VcfFormatError
from ..models.core import VariantRecord

logger = logging.getLogger(__name__)

PASSING_FILTERS = frozenset({"PASS", "0", "."})
N_FIXED_COLUMNS = 8
N_LEADING_COLUMNS = 9  # fixed columns + FORMAT


class VcfReader:
    """
    Reads VariantRecords from a VCF file (optionally gzip-compressed).

    The header is parsed on construction; iterating yields records once,
    in file order. Bytes that are not valid UTF-8 are replaced, not fatal.
    Records outside autosomes 1-22, and with ``pass_only`` records whose
    FILTER is not PASS/0/., are consumed silently.
    """

    def __init__(self, path: Path, pass_only: bool = False):
        self.path = Path(path)
        self.pass_only = pass_only
        self.samples: list[str] = []
        self.sample_index: dict[str, int] = {}
        self.dropped = 0
        self.filtered = 0
        self._handle = self._open(self.path)
        try:
            self._read_header()
        except Exception:
            self._handle.close()
            raise

    @staticmethod
    def _open(path: Path) -> IO[str]:
        if path.suffix == ".gz":
            return gzip.open(path, "rt", encoding="utf-8", errors="replace")
        return open(path, encoding="utf-8", errors="replace")

    def _read_header(self) -> None:
        for line in self._handle:
            if line.startswith("#CHROM"):
                self.samples = line.split()[N_LEADING_COLUMNS:]
                self.sample_index = {s: i for i, s in enumerate(self.samples)}
                logger.debug("%s: %d samples in header", self.path, len(self.samples))
                return
            if not line.startswith("#"):
                break
        raise VcfFormatError(f"Missing #CHROM header line in {self.path}")

    def __iter__(self) -> Iterator[VariantRecord]:
        for line in self._handle:
            fields = line.split()
            if not fields:
                continue
            if len(fields) < N_FIXED_COLUMNS:
                raise VcfFormatError(
                    f"Truncated record in {self.path} ({len(fields)} columns): {line.rstrip()}"
                )

            if self.pass_only and fields[6] not in PASSING_FILTERS:
                self.filtered += 1
                continue

            chrom = SiteKernel.normalize_chromosome(fields[0])
            if not SiteKernel.is_autosome(chrom):
                self.dropped += 1
                logger.debug("Dropping %s:%s (not an autosome)", fields[0], fields[1])
                continue

            yield self._parse_record(chrom, fields)

    def _parse_record(self, chrom: int, fields: list[str]) -> VariantRecord:
        try:
            pos = int(fields[1])
        except ValueError:
            raise VcfFormatError(f"Invalid position at {fields[0]}:{fields[1]}") from None

        entries = tuple(fields[N_LEADING_COLUMNS:])
        if len(entries) != len(self.samples):
            raise VcfFormatError(
                f"Sample column count mismatch in {self.path} at {fields[0]}:{fields[1]}: "
                f"{len(entries)} entries for {len(self.samples)} header samples"
            )

        genotypes = np.empty(len(entries), dtype=np.int8)
        for i, entry in enumerate(entries):
            try:
                genotypes[i] = SiteKernel.classify_genotype(entry)
            except ValueError:
                raise GenotypeParseError(fields[0], fields[1], entry) from None

        return VariantRecord(
            chrom=chrom,
            pos=pos,
            id=fields[2],
            ref=fields[3],
            alt=fields[4],
            qual=fields[5],
            filter=fields[6],
            info=fields[7],
            format=fields[8] if len(fields) > N_FIXED_COLUMNS else "",
            genotypes=genotypes,
            entries=entries,
        )

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> "VcfReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
