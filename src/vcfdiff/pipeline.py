"""
Pipeline Orchestrator: Manages the execution flow of one comparison.

This module handles:
1. Opening both VCF files and resolving the shared individuals.
2. Opening every output table for the configured prefix.
3. Running the dual-stream comparator.
4. Writing the per-individual and stratified summary tables.
"""

import logging

from rich.console import Console

from .core.aggregate import ConcordanceAggregator, FrequencyBinner
from .core.comparator import Comparator, ComparisonStats
from .core.overlap import SampleOverlap
from .io.input import VcfReader
from .io.output import DiffWriter
from .models.core import DiffConfig
from .utils.logging import console as default_console
from .utils.logging import phase

logger = logging.getLogger(__name__)


class Pipeline:
    def __init__(self, config: DiffConfig, console: Console | None = None):
        self.config = config
        self.console = console or default_console
        self.aggregator: ConcordanceAggregator | None = None
        self.stats: ComparisonStats | None = None

    def run(self) -> ComparisonStats:
        """Execute the comparison and write all tables."""
        config = self.config
        self.console.print("[bold blue]Starting vcfdiff comparison[/bold blue]")
        self.console.print(f"Output prefix: {config.out_prefix}")

        config.out_prefix.parent.mkdir(parents=True, exist_ok=True)

        with VcfReader(config.vcf1, pass_only=config.pass_only) as reader1, VcfReader(
            config.vcf2, pass_only=config.pass_only
        ) as reader2:
            overlap = SampleOverlap.resolve(
                reader1.samples, reader2.sample_index, config.exclude_ids
            )
            binner = FrequencyBinner(config.freq_cuts) if config.write_freq else None
            self.aggregator = ConcordanceAggregator(
                overlap.sample_ids,
                binner=binner,
                by_gq=config.write_gq,
                joint=config.write_joint,
            )

            with DiffWriter(config) as writer:
                comparator = Comparator(
                    reader1,
                    reader2,
                    overlap,
                    self.aggregator,
                    sink=writer,
                    include_monomorphic=config.include_monomorphic,
                    flip=config.flip,
                    min_ns=config.min_ns,
                    labels=(str(config.vcf1), str(config.vcf2)),
                )
                with phase("Comparing sites", logger, status=self.console):
                    self.stats = comparator.run()
                writer.write_summaries(self.aggregator)

            if reader1.dropped or reader2.dropped:
                logger.info(
                    "Skipped records outside autosomes: %d in vcf1, %d in vcf2",
                    reader1.dropped,
                    reader2.dropped,
                )

        self._print_stats(self.stats)
        return self.stats

    def _print_stats(self, stats: ComparisonStats) -> None:
        self.console.print(
            f"Sites in both: [bold]{stats.n_both}[/bold], "
            f"ALT mismatch: [bold]{stats.n_mismatch}[/bold], "
            f"only in vcf1: [bold]{stats.n_only1}[/bold], "
            f"only in vcf2: [bold]{stats.n_only2}[/bold]"
        )
        if stats.n_suppressed:
            self.console.print(
                f"[yellow]Suppressed {stats.n_suppressed} matched sites below "
                f"NS={self.config.min_ns}[/yellow]"
            )
        self.console.print("[bold green]Comparison completed successfully.[/bold green]")
