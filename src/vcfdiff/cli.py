"""
CLI Entry Point: Exposes the vcfdiff functionality via command line.
"""

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.markup import escape

from . import __version__
from .exceptions import VcfDiffError
from .models.core import DEFAULT_FREQ_CUTS, DiffConfig, SummaryConfig
from .pipeline import Pipeline
from .report import summarize as build_summary
from .utils.logging import console, setup_logging

app = typer.Typer(help="vcfdiff: genotype concordance between two VCF files")


def _fail(message: str) -> typer.Exit:
    console.print(f"[bold red]Error: {escape(message)}[/bold red]")
    return typer.Exit(code=1)


def _validation_message(e: ValidationError) -> str:
    return "; ".join(err["msg"] for err in e.errors())


def _split_csv(value: str) -> list[str]:
    return [item for item in value.split(",") if item]


@app.callback()
def main():
    """
    vcfdiff: genotype concordance between two VCF files
    """
    pass


@app.command()
def version():
    """Show the vcfdiff version."""
    typer.echo(f"vcfdiff {__version__}")


@app.command()
def diff(
    vcf1: Path = typer.Option(..., "--vcf1", help="First VCF file (.vcf or .vcf.gz)"),
    vcf2: Path = typer.Option(..., "--vcf2", help="Second VCF file (.vcf or .vcf.gz)"),
    out: Path = typer.Option(..., "--out", "-o", help="Output file prefix"),
    pass_only: bool = typer.Option(
        False, "--filter", help="Only compare records with FILTER of PASS, 0 or ."
    ),
    include_monomorphic: bool = typer.Option(
        False, "--mono", help="Keep sites where no compared individual carries ALT"
    ),
    flip: bool = typer.Option(
        False, "--flip", help="Swap HomRef/HomAlt in vcf1 at sites that look strand-flipped"
    ),
    exclude_ids: str = typer.Option(
        "", "--exIDs", "--exclude-ids", help="Comma-separated sample IDs to ignore"
    ),
    min_ns: int = typer.Option(
        0, "--minns", help="Skip matched sites whose INFO NS is below this value"
    ),
    only1: bool = typer.Option(False, "--only1/--no-only1", help="Write <out>.only1"),
    only2: bool = typer.Option(False, "--only2/--no-only2", help="Write <out>.only2"),
    gq: bool = typer.Option(False, "--gq/--no-gq", help="Write <out>.gqs (GQ from vcf2)"),
    freq: bool = typer.Option(False, "--freq/--no-freq", help="Write <out>.frqs (AF from vcf1)"),
    joint: bool = typer.Option(False, "--joint/--no-joint", help="Write <out>.joint"),
    freq_cuts: str = typer.Option(
        ",".join(str(c) for c in DEFAULT_FREQ_CUTS),
        "--freq-cuts",
        help="Comma-separated minor allele frequency cutoffs",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """
    Compare genotypes of the individuals shared by two sorted VCF files.
    """
    setup_logging(verbose=verbose, log_file=log_file)

    try:
        cuts = [float(c) for c in _split_csv(freq_cuts)]
    except ValueError as e:
        raise _fail(f"Invalid --freq-cuts value: {freq_cuts}") from e

    try:
        config = DiffConfig(
            vcf1=vcf1,
            vcf2=vcf2,
            out_prefix=out,
            write_only1=only1,
            write_only2=only2,
            write_freq=freq,
            write_gq=gq,
            write_joint=joint,
            pass_only=pass_only,
            include_monomorphic=include_monomorphic,
            min_ns=min_ns,
            exclude_ids=_split_csv(exclude_ids),
            flip=flip,
            freq_cuts=cuts,
        )
    except ValidationError as e:
        raise _fail(_validation_message(e)) from e

    try:
        Pipeline(config).run()
    except (VcfDiffError, OSError) as e:
        raise _fail(str(e)) from e


@app.command()
def summarize(
    out: Path = typer.Option(..., "--out", "-o", help="Prefix of a previous diff run"),
    order: Path | None = typer.Option(
        None, "--order", help="File listing sample IDs (first column) in output order"
    ),
    depth_order: bool = typer.Option(
        False, "--depth-order", help="Also write <out>.ind.srt.dat sorted by depth"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose debug logging"),
):
    """
    Summarize the tables of a previous diff run.
    """
    setup_logging(verbose=verbose)

    try:
        config = SummaryConfig(out_prefix=out, order_file=order, depth_order=depth_order)
    except ValidationError as e:
        raise _fail(_validation_message(e)) from e

    try:
        build_summary(config)
    except (OSError, ValueError) as e:
        raise _fail(str(e)) from e

    console.print(f"[bold green]Summary written to {config.output_path('summary')}[/bold green]")


if __name__ == "__main__":
    app()
