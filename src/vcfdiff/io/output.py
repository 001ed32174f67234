"""
Output Writers: tab-separated concordance tables.

Every table is written to ``<prefix>.<suffix>``. Column order is fixed and
consumed by downstream plotting, so rows are built positionally.
"""

import logging
from pathlib import Path
from typing import IO

import numpy as np

from ..core.aggregate import ConcordanceAggregator
from ..core.matrix import ConcordanceMatrix
from ..models.core import DiffConfig, VariantRecord

logger = logging.getLogger(__name__)


class TableWriter:
    """One tab-separated output file."""

    def __init__(self, path: Path):
        self.path = path
        self.file: IO[str] = open(path, "w", encoding="utf-8")
        self.rows = 0

    def write(self, row: list[str]) -> None:
        self.file.write("\t".join(row) + "\n")
        self.rows += 1

    def close(self):
        self.file.close()


class DiffWriter:
    """
    Writes every table of a comparison run.

    ``both``, ``mismatch`` and ``ind`` are always produced; ``only1``,
    ``only2``, ``frqs``, ``gqs`` and ``joint`` follow the config flags.
    All files are opened up front so an unwritable prefix fails before any
    input is read.
    """

    def __init__(self, config: DiffConfig):
        self.config = config
        self.tables: dict[str, TableWriter] = {}
        suffixes = ["both", "mismatch", "ind"]
        if config.write_only1:
            suffixes.append("only1")
        if config.write_only2:
            suffixes.append("only2")
        if config.write_freq:
            suffixes.append("frqs")
        if config.write_gq:
            suffixes.append("gqs")
        if config.write_joint:
            suffixes.append("joint")

        try:
            for suffix in suffixes:
                self.tables[suffix] = TableWriter(config.output_path(suffix))
        except OSError:
            self.close()
            raise

    def write_both(self, record: VariantRecord, site: ConcordanceMatrix) -> None:
        self.tables["both"].write(record.fixed_fields + site.as_fields())

    def write_mismatch(
        self, record1: VariantRecord, record2: VariantRecord, site: ConcordanceMatrix
    ) -> None:
        fields = record1.fixed_fields
        fields[4] = f"{record1.alt}-{record2.alt}"
        self.tables["mismatch"].write(fields + site.as_fields())

    def write_only(self, which: int, record: VariantRecord, counts: np.ndarray) -> None:
        table = self.tables.get(f"only{which}")
        if table is not None:
            table.write(record.fixed_fields + [str(int(c)) for c in counts])

    def write_summaries(self, aggregator: ConcordanceAggregator) -> None:
        """Write the per-individual and stratified tables at the end of a run."""
        depths = aggregator.average_depths()
        ind = self.tables["ind"]
        for i, sample_id in enumerate(aggregator.sample_ids):
            ind.write(
                [sample_id] + aggregator.individual(i).as_fields() + [f"{depths[i]:.4f}"]
            )

        if "frqs" in self.tables and aggregator.frequency_counts is not None:
            for category in range(len(aggregator.frequency_counts)):
                self.tables["frqs"].write(
                    [str(category)] + aggregator.frequency(category).as_fields()
                )

        if "gqs" in self.tables and aggregator.gq_counts is not None:
            for gq in range(len(aggregator.gq_counts)):
                self.tables["gqs"].write([str(gq)] + aggregator.gq(gq).as_fields())

        if "joint" in self.tables:
            for key, matrix in aggregator.joint.items():
                self.tables["joint"].write([str(k) for k in key] + matrix.as_fields())

    def close(self):
        for table in self.tables.values():
            table.close()
            logger.debug("Wrote %d rows to %s", table.rows, table.path)

    def __enter__(self) -> "DiffWriter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
