"""Tests for the dual-stream comparator."""

import logging

import numpy as np
import pytest
from conftest import site

from vcfdiff.core.aggregate import ConcordanceAggregator
from vcfdiff.core.comparator import (
    Comparator,
    SiteClass,
    flip_homozygotes,
    should_flip,
)
from vcfdiff.core.matrix import ConcordanceMatrix
from vcfdiff.core.overlap import SampleOverlap
from vcfdiff.exceptions import UnsortedInputError
from vcfdiff.io.input import VcfReader
from vcfdiff.models.core import GenotypeCall as G

SAMPLES = ["A", "B", "C"]


class RecordingSink:
    def __init__(self):
        self.both = []
        self.mismatch = []
        self.only = {1: [], 2: []}

    def write_both(self, record, site):
        self.both.append((record, site))

    def write_mismatch(self, record1, record2, site):
        self.mismatch.append((record1, record2, site))

    def write_only(self, which, record, counts):
        self.only[which].append((record, counts))


def compare(vcf_factory, lines1, lines2, samples1=SAMPLES, samples2=SAMPLES, exclude=(), **kwargs):
    """Run the comparator over two generated files."""
    path1 = vcf_factory("one.vcf", samples1, lines1)
    path2 = vcf_factory("two.vcf", samples2, lines2)
    with VcfReader(path1) as r1, VcfReader(path2) as r2:
        overlap = SampleOverlap.resolve(r1.samples, r2.sample_index, exclude)
        aggregator = ConcordanceAggregator(overlap.sample_ids)
        sink = RecordingSink()
        comparator = Comparator(r1, r2, overlap, aggregator, sink=sink, **kwargs)
        stats = comparator.run()
    return stats, aggregator, sink


def test_single_matched_site(vcf_factory):
    stats, agg, sink = compare(
        vcf_factory,
        [site("1", 100, ["0/0", "0/1", "1/1"])],
        [site("1", 100, ["0/0", "0/1", "0/1"])],
    )

    assert stats.n_both == 1
    assert agg.overall.cell(G.HOMREF, G.HOMREF) == 1
    assert agg.overall.cell(G.HET, G.HET) == 1
    assert agg.overall.cell(G.HOMALT, G.HET) == 1
    assert agg.overall.total() == 3

    assert agg.individual(agg.sample_ids.index("C")).cell(G.HOMALT, G.HET) == 1
    assert agg.individual(agg.sample_ids.index("C")).total() == 1

    assert len(sink.both) == 1
    record, matrix = sink.both[0]
    assert record.key == (1, 100)
    assert matrix == agg.overall


def test_site_totals_equal_overlap_size(vcf_factory):
    stats, agg, sink = compare(
        vcf_factory,
        [
            site("1", 100, ["0/0", "0/1", "1/1"]),
            site("1", 200, ["./.", "1/1", "0/1"]),
            site("2", 50, ["0|1", "1|0", "0/0"]),
        ],
        [
            site("1", 100, ["0/0", "0/1", "0/1"]),
            site("1", 200, ["0/1", "./.", "0/1"]),
            site("2", 50, ["1/1", "0/1", "0/0"]),
        ],
    )

    assert stats.n_both == 3
    for _, matrix in sink.both:
        assert matrix.total() == len(SAMPLES)

    per_individual = ConcordanceMatrix.sum_of(agg.individual(i) for i in range(len(SAMPLES)))
    assert per_individual == agg.overall


def test_excluded_individual_is_not_counted(vcf_factory):
    _, agg, _ = compare(
        vcf_factory,
        [site("1", 100, ["0/0", "0/1", "1/1"])],
        [site("1", 100, ["0/0", "0/1", "0/1"])],
        exclude=["C"],
    )

    assert agg.sample_ids == ["A", "B"]
    assert agg.overall.total() == 2
    assert agg.overall.cell(G.HOMALT, G.HET) == 0


def test_overlap_uses_sample_names_not_columns(vcf_factory):
    _, agg, _ = compare(
        vcf_factory,
        [site("1", 100, ["0/0", "1/1"])],
        [site("1", 100, ["1/1", "0/1", "0/0"])],
        samples1=["A", "B"],
        samples2=["B", "X", "A"],
    )

    assert agg.individual(agg.sample_ids.index("A")).cell(G.HOMREF, G.HOMREF) == 1
    assert agg.individual(agg.sample_ids.index("B")).cell(G.HOMALT, G.HOMALT) == 1


def test_min_ns_suppresses_matches(vcf_factory):
    stats, agg, sink = compare(
        vcf_factory,
        [site("1", 100, ["0/1", "0/1", "0/1"], info="NS=5"), site("1", 200, ["0/1", "0/0", "0/0"])],
        [site("1", 100, ["0/1", "0/1", "0/1"]), site("1", 200, ["0/1", "0/0", "0/0"], info="NS=50")],
        min_ns=10,
    )

    assert stats.n_suppressed == 1
    assert stats.n_both == 1
    assert stats.n_only1 == stats.n_only2 == 0
    assert [r.pos for r, _ in sink.both] == [200]
    assert agg.overall.total() == 3


def test_flip_corrects_swapped_homozygotes(vcf_factory):
    lines1 = [site("1", 100, ["0/0", "0/0", "1/1"])]
    lines2 = [site("1", 100, ["1/1", "1/1", "0/0"])]

    _, agg, _ = compare(vcf_factory, lines1, lines2, flip=True)
    assert agg.overall.cell(G.HOMALT, G.HOMALT) == 2
    assert agg.overall.cell(G.HOMREF, G.HOMREF) == 1
    assert agg.overall.concordant() == 3

    _, agg, _ = compare(vcf_factory, lines1, lines2)
    assert agg.overall.cell(G.HOMREF, G.HOMALT) == 2
    assert agg.overall.cell(G.HOMALT, G.HOMREF) == 1
    assert agg.overall.concordant() == 0


def test_flip_leaves_concordant_sites_alone(vcf_factory):
    _, agg, _ = compare(
        vcf_factory,
        [site("1", 100, ["0/0", "1/1", "0/1"])],
        [site("1", 100, ["0/0", "1/1", "1/1"])],
        flip=True,
    )
    assert agg.overall.cell(G.HOMREF, G.HOMREF) == 1
    assert agg.overall.cell(G.HOMALT, G.HOMALT) == 1
    assert agg.overall.cell(G.HET, G.HOMALT) == 1


def test_should_flip_and_flip_homozygotes():
    genos1 = np.array([G.HOMREF, G.HOMALT, G.HET, G.MISSING], dtype=np.int8)
    genos2 = np.array([G.HOMALT, G.HOMREF, G.HET, G.HOMREF], dtype=np.int8)

    assert should_flip(ConcordanceMatrix.from_genotypes(genos1, genos2))
    assert not should_flip(ConcordanceMatrix.from_genotypes(genos1, genos1))
    assert flip_homozygotes(genos1).tolist() == [G.HOMALT, G.HOMREF, G.HET, G.MISSING]
    assert genos1.tolist() == [G.HOMREF, G.HOMALT, G.HET, G.MISSING]


def test_alt_mismatch_is_not_aggregated(vcf_factory):
    stats, agg, sink = compare(
        vcf_factory,
        [site("1", 100, ["0/1", "0/0", "0/0"], alt="T"), site("1", 200, ["0/1", "0/0", "0/0"])],
        [site("1", 100, ["0/1", "0/0", "0/0"], alt="G"), site("1", 200, ["0/1", "0/0", "0/0"])],
    )

    assert stats.n_mismatch == 1
    assert stats.n_both == 1
    assert agg.n_sites == 1
    assert agg.overall.total() == 3

    record1, record2, matrix = sink.mismatch[0]
    assert (record1.alt, record2.alt) == ("T", "G")
    assert matrix.cell(G.HET, G.HET) == 1


def test_alt_difference_without_alt_calls_is_a_match(vcf_factory):
    stats, agg, _ = compare(
        vcf_factory,
        [site("1", 100, ["0/0", "0/0", "0/0"], alt="T")],
        [site("1", 100, ["0/0", "0/0", "./."], alt="G")],
        include_monomorphic=True,
    )
    assert stats.n_mismatch == 0
    assert stats.n_both == 1
    assert agg.overall.cell(G.HOMREF, G.MISSING) == 1


def test_sites_present_in_one_file(vcf_factory):
    stats, agg, sink = compare(
        vcf_factory,
        [site("1", 100, ["0/1", "0/0", "1/1"]), site("1", 200, ["0/1", "0/0", "0/0"])],
        [site("1", 200, ["0/1", "0/0", "0/0"]), site("1", 300, ["./.", "1/1", "1/1"])],
    )

    assert (stats.n_only1, stats.n_both, stats.n_only2) == (1, 1, 1)
    assert agg.n_sites == 1

    record, counts = sink.only[1][0]
    assert record.pos == 100
    assert counts.tolist() == [0, 1, 1, 1]

    record, counts = sink.only[2][0]
    assert record.pos == 300
    assert counts.tolist() == [1, 0, 0, 2]


def test_trailing_records_are_drained(vcf_factory):
    stats, _, _ = compare(
        vcf_factory,
        [site("1", 100, ["0/1", "0/0", "0/0"])],
        [
            site("1", 100, ["0/1", "0/0", "0/0"]),
            site("3", 1, ["0/1", "0/0", "0/0"]),
            site("4", 1, ["0/1", "0/0", "0/0"]),
        ],
    )
    assert (stats.n_only1, stats.n_both, stats.n_only2) == (0, 1, 2)


def test_monomorphic_records_are_skipped(vcf_factory):
    lines1 = [site("1", 100, ["0/0", "0/0", "./."])]
    lines2 = [site("1", 100, ["0/0", "0/1", "0/0"])]

    stats, agg, _ = compare(vcf_factory, lines1, lines2)
    assert stats.n_both == 0
    assert stats.n_only2 == 1
    assert stats.n_monomorphic1 == 1
    assert agg.overall.total() == 0

    stats, agg, _ = compare(vcf_factory, lines1, lines2, include_monomorphic=True)
    assert stats.n_both == 1
    assert stats.n_only2 == 0
    assert agg.overall.cell(G.HOMREF, G.HET) == 1


def test_monomorphic_check_only_looks_at_overlap(vcf_factory):
    stats, _, _ = compare(
        vcf_factory,
        [site("1", 100, ["0/0", "1/1"])],
        [site("1", 100, ["0/1"])],
        samples1=["A", "Z"],
        samples2=["A"],
    )
    assert stats.n_monomorphic1 == 1
    assert stats.n_only2 == 1


def test_unsorted_input_is_rejected(vcf_factory):
    with pytest.raises(UnsortedInputError, match="1:100 follows 1:200"):
        compare(
            vcf_factory,
            [site("1", 200, ["0/1", "0/0", "0/0"]), site("1", 100, ["0/1", "0/0", "0/0"])],
            [site("1", 200, ["0/1", "0/0", "0/0"])],
        )


def test_chromosomes_order_numerically(vcf_factory):
    lines = [site("chr2", 100, ["0/1", "0/0", "0/0"]), site("chr10", 50, ["0/1", "0/0", "0/0"])]
    stats, _, sink = compare(vcf_factory, lines, lines)

    assert stats.n_both == 2
    assert [r.key for r, _ in sink.both] == [(2, 100), (10, 50)]


def test_reference_mismatch_is_reported(vcf_factory, caplog):
    with caplog.at_level(logging.WARNING, logger="vcfdiff"):
        stats, _, _ = compare(
            vcf_factory,
            [site("1", 100, ["0/1", "0/0", "0/0"], ref="A")],
            [site("1", 100, ["0/1", "0/0", "0/0"], ref="G")],
        )

    assert stats.n_ref_mismatch == 1
    assert stats.n_both == 1
    assert "Reference bases mismatch at 1:100 (A-G)" in caplog.text


def test_compare_site_returns_class(vcf_factory):
    path = vcf_factory("one.vcf", SAMPLES, [site("1", 100, ["0/1", "0/0", "0/0"], info="NS=1")])
    with VcfReader(path) as reader:
        record = next(iter(reader))
    overlap = SampleOverlap.resolve(SAMPLES, {s: i for i, s in enumerate(SAMPLES)})
    comparator = Comparator([], [], overlap, ConcordanceAggregator(SAMPLES), min_ns=2)

    assert comparator.compare_site(record, record.genotypes, record, record.genotypes) is SiteClass.SUPPRESSED
    comparator.min_ns = 0
    assert comparator.compare_site(record, record.genotypes, record, record.genotypes) is SiteClass.BOTH
