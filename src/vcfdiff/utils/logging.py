"""
Logging utilities for vcfdiff.

All diagnostics (progress, warnings, fatal errors) go to standard error
through a rich handler, so standard output stays free for piping.
"""

import logging
import time
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "console",
    "setup_logging",
    "phase",
]

console = Console(stderr=True)


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """
    Route the ``vcfdiff`` loggers to the stderr console.

    Args:
        verbose: Log DEBUG records (skipped monomorphic sites, dropped
            chromosomes, per-table row counts) instead of INFO and above.
        log_file: Also append plain-text records to this file.
    """
    handlers: list[logging.Handler] = [
        RichHandler(console=console, markup=False, show_path=verbose, rich_tracebacks=True)
    ]
    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


@contextmanager
def phase(description: str, logger: logging.Logger, status: Console | None = None):
    """
    Time one step of a run and log how long it took.

    With ``status``, a spinner showing ``description`` is displayed on that
    console while the step runs.
    """
    start = time.perf_counter()
    try:
        if status is not None:
            with status.status(f"[bold green]{description}...[/bold green]"):
                yield
        else:
            yield
    except Exception:
        logger.error("%s failed after %.2fs", description, time.perf_counter() - start)
        raise
    logger.info("%s finished in %.2fs", description, time.perf_counter() - start)
