"""
Summary tables derived from the output of a comparison run.

Reads ``<prefix>.both`` and ``<prefix>.ind`` and writes:
- ``<prefix>.AC.dat``: called-genotype cross-tabulation per adjusted
  non-reference allele count
- ``<prefix>.ind.dat``: per-individual concordance by genotype class
- ``<prefix>.ind.srt.dat``: the same, sorted by average depth (optional)
- ``<prefix>.summary``: overall, reference-oriented and
  major-allele-oriented concordance

Only genotype pairs called in both files (no MISSING on either side) enter
these tables.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from .core.matrix import N_CALLS, N_CELLS
from .models.core import SummaryConfig
from .utils.logging import phase

logger = logging.getLogger(__name__)

N_FIXED = 8


def format_prop(num: float, denom: float, fmt: str = "{:.4f}", nan: str = "NA") -> str:
    return fmt.format(num / denom) if denom != 0 else nan


def called_block(counts: np.ndarray) -> np.ndarray:
    """3x3 HOMREF/HET/HOMALT block of a 16-cell counter row."""
    return counts.reshape(N_CALLS, N_CALLS)[1:, 1:]


@dataclass
class ConcordanceSummary:
    """Accumulated called-genotype counts over all "both" sites."""

    ref_counts: np.ndarray = field(default_factory=lambda: np.zeros((3, 3), dtype=np.int64))
    major_counts: np.ndarray = field(default_factory=lambda: np.zeros((3, 3), dtype=np.int64))
    by_allele_count: dict[int, np.ndarray] = field(default_factory=dict)
    n_individuals: int | None = None

    @property
    def n_genotypes(self) -> int:
        return int(self.ref_counts.sum())

    def add_site(self, counts: np.ndarray) -> None:
        called = called_block(counts)
        if self.n_individuals is None:
            self.n_individuals = int(counts.sum())

        an = 2 * int(called.sum())
        if an == 0:
            return
        ac = int(called[1].sum()) + 2 * int(called[2].sum())
        adjusted = int(f"{ac * self.n_individuals * 2 / an:.0f}")

        bucket = self.by_allele_count.setdefault(adjusted, np.zeros((3, 3), dtype=np.int64))
        bucket += called
        self.ref_counts += called
        # REF is the minor allele when more than half of the alleles are ALT
        self.major_counts += called[::-1, ::-1] if ac * 2 > an else called

    def lines(self) -> list[str]:
        ref = self.ref_counts.ravel()
        maj = self.major_counts.ravel()

        def either(label: str, v: np.ndarray, num: list[int], denom: slice) -> str:
            n, d = int(v[num].sum()), int(v[denom].sum())
            return "\t".join([label, str(n), str(d), format_prop(n, d)])

        def row(label: str, v: np.ndarray, first: int) -> str:
            cells = v[first : first + 3]
            diag = int(v[first + first // 3])
            return "\t".join(
                [label] + [str(int(c)) for c in cells] + [format_prop(diag, int(cells.sum()))]
            )

        return [
            either("OVERALL:", ref, [0, 4, 8], slice(0, 9)),
            either("NREF-EITHER:", ref, [4, 8], slice(1, 9)),
            either("NMAJ-EITHER:", maj, [4, 8], slice(1, 9)),
            "",
            row("HOMREF:", ref, 0),
            row("HET:", ref, 3),
            row("HOMALT:", ref, 6),
            "",
            row("HOMMAJ:", maj, 0),
            row("HET:", maj, 3),
            row("HOMMIN:", maj, 6),
        ]


def read_counter_rows(path: Path, n_keys: int):
    """Yield (key fields, 16-cell counts, trailing fields) per table row."""
    with open(path, encoding="utf-8") as f:
        for line in f:
            fields = line.rstrip("\n").split("\t")
            if not fields or fields == [""]:
                continue
            counts = np.array(fields[n_keys : n_keys + N_CELLS], dtype=np.int64)
            yield fields[:n_keys], counts, fields[n_keys + N_CELLS :]


def individual_line(sample_id: str, counts: np.ndarray, depth: str) -> str:
    called = called_block(counts)
    totals = called.sum(axis=1)
    rights = np.diag(called)
    wrongs = totals - rights
    values = [*totals, *rights, *wrongs, called.sum()]
    return "\t".join([sample_id] + [str(int(v)) for v in values] + [depth])


def read_order(path: Path) -> list[str]:
    with open(path, encoding="utf-8") as f:
        return [line.split()[0] for line in f if line.split()]


def summarize(config: SummaryConfig) -> ConcordanceSummary:
    """Build every summary table for ``config.out_prefix``."""
    summary = ConcordanceSummary()
    with phase("Reading site table", logger):
        for _, counts, _ in read_counter_rows(config.output_path("both"), N_FIXED):
            summary.add_site(counts)

    with open(config.output_path("AC.dat"), "w", encoding="utf-8") as out:
        for ac in sorted(summary.by_allele_count):
            cells = summary.by_allele_count[ac].ravel()
            out.write(
                "\t".join([str(ac)] + [str(int(c)) for c in cells] + [str(summary.n_genotypes)])
                + "\n"
            )

    ind_lines: dict[str, str] = {}
    depths: dict[str, float] = {}
    for keys, counts, rest in read_counter_rows(config.output_path("ind"), 1):
        depth = rest[0] if rest else "0.0000"
        ind_lines[keys[0]] = individual_line(keys[0], counts, depth)
        try:
            depths[keys[0]] = float(depth)
        except ValueError:
            depths[keys[0]] = 0.0

    if config.order_file is not None:
        ordered = [s for s in read_order(config.order_file) if s in ind_lines]
    else:
        ordered = list(ind_lines)

    with open(config.output_path("ind.dat"), "w", encoding="utf-8") as out:
        for sample_id in ordered:
            out.write(ind_lines[sample_id] + "\n")

    if config.depth_order:
        with open(config.output_path("ind.srt.dat"), "w", encoding="utf-8") as out:
            for sample_id in sorted(ordered, key=lambda s: depths[s]):
                out.write(ind_lines[sample_id] + "\n")

    with open(config.output_path("summary"), "w", encoding="utf-8") as out:
        out.write("\n".join(summary.lines()) + "\n")

    logger.info(
        "Summarized %d called genotypes of %d individuals across %d allele-count classes",
        summary.n_genotypes,
        summary.n_individuals or 0,
        len(summary.by_allele_count),
    )
    return summary
