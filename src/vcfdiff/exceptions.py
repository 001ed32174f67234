"""Fatal error conditions raised while comparing two VCF files."""


class VcfDiffError(Exception):
    """Base class for fatal vcfdiff errors."""


class VcfFormatError(VcfDiffError, ValueError):
    """A VCF file is structurally unusable (no header, truncated record)."""


class GenotypeParseError(VcfFormatError):
    """A per-sample genotype token could not be classified."""

    def __init__(self, chrom: str, pos: str, token: str):
        self.chrom = chrom
        self.pos = pos
        self.token = token
        super().__init__(f"Unrecognized genotype '{token}' at {chrom}:{pos}")


class EmptyOverlapError(VcfDiffError):
    """No individuals are shared by both files after exclusions."""


class UnsortedInputError(VcfDiffError):
    """A VCF stream went backwards in (chromosome, position) order."""
