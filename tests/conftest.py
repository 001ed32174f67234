"""Pytest configuration and fixtures."""

import gzip
import sys
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Add src directory to path so tests use local code, not installed package
project_root = Path(__file__).parent.parent
src_dir = project_root / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

VCF_META = [
    "##fileformat=VCFv4.2",
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
]


def site(
    chrom: str,
    pos: int,
    genotypes: list[str],
    ref: str = "A",
    alt: str = "T",
    info: str = ".",
    filter: str = "PASS",
    fmt: str = "GT",
    id: str = ".",
    qual: str = "50",
) -> str:
    """Render one VCF data line."""
    return "\t".join([chrom, str(pos), id, ref, alt, qual, filter, info, fmt, *genotypes])


def write_vcf(path: Path, samples: list[str], lines: list[str], meta: bool = True) -> Path:
    """Write a minimal VCF; gzip-compressed when the name ends in .gz."""
    header = "\t".join(
        ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT", *samples]
    )
    content = "\n".join((VCF_META if meta else []) + [header] + lines) + "\n"
    if path.suffix == ".gz":
        with gzip.open(path, "wt") as f:
            f.write(content)
    else:
        path.write_text(content)
    return path


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def vcf_factory(temp_dir: Path) -> Callable[..., Path]:
    """Write VCF files into the temporary directory by name."""

    def _make(name: str, samples: list[str], lines: list[str], meta: bool = True) -> Path:
        return write_vcf(temp_dir / name, samples, lines, meta=meta)

    return _make


@pytest.fixture
def scenario_vcfs(vcf_factory) -> tuple[Path, Path]:
    """
    Three shared samples, one matched site at 1:100.

    file1 = {0/0, 0/1, 1/1}, file2 = {0/0, 0/1, 0/1}
    """
    vcf1 = vcf_factory("a.vcf", ["A", "B", "C"], [site("1", 100, ["0/0", "0/1", "1/1"])])
    vcf2 = vcf_factory("b.vcf", ["A", "B", "C"], [site("1", 100, ["0/0", "0/1", "0/1"])])
    return vcf1, vcf2
