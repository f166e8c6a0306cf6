import logging
import orjson
import pytest

from strgraph.call import (
    AlleleCount,
    CountTable,
    GenotypeFilter,
    GenotyperParams,
    LocusStats,
    NoGenotype,
    Read,
    RepeatAnalyzer,
    RepeatGenotype,
)
from strgraph.call.repeat_analyzer import (
    calculate_haplotype_depth,
    calculate_min_breakpoint_spanning_reads,
    generate_candidate_allele_sizes,
)

DIPLOID_STATS = LocusStats(allele_count=AlleleCount.TWO, mean_read_length=150, depth=30.0)


@pytest.mark.parametrize("spanning,flanking,inrepeat,candidates", [
    ({3: 1, 5: 2}, {8: 1, 2: 4}, {}, [3, 5, 8]),
    ({10: 3}, {3: 1}, {}, [10]),
    ({10: 3}, {3: 1}, {10: 2}, [10]),  # ties aren't appended
    ({4: 1}, {6: 1}, {9: 1}, [4, 9]),
    ({}, {6: 1}, {}, [6]),
    ({}, {}, {}, []),
])
def test_generate_candidate_allele_sizes(spanning, flanking, inrepeat, candidates):
    assert generate_candidate_allele_sizes(
        CountTable(spanning), CountTable(flanking), CountTable(inrepeat)) == candidates


def test_haplotype_depth():
    assert calculate_haplotype_depth(30, AlleleCount.TWO) == 15
    assert calculate_haplotype_depth(30, AlleleCount.ONE) == 30


def test_min_breakpoint_spanning_reads():
    assert calculate_min_breakpoint_spanning_reads(9, AlleleCount.TWO) == 9
    assert calculate_min_breakpoint_spanning_reads(9, AlleleCount.ONE) == 4


def test_process_mates_spanning(locus, aln, spanning):
    analyzer = RepeatAnalyzer(locus)
    outside_mate = Read("mate", "ATCGGATCCA")

    for i in range(2):
        read, alignment = spanning(f"read{i}", 5)
        analyzer.process_mates(read, alignment, outside_mate, aln("0[10M]"))

    assert analyzer.counts_of_spanning_reads == CountTable({5: 2})
    assert analyzer.counts_of_flanking_reads == CountTable()
    assert analyzer.counts_of_inrepeat_reads == CountTable()


def test_process_mates_routes_by_type(locus, aln):
    analyzer = RepeatAnalyzer(locus)

    flanking = Read("flanking", "ATCGGATCCACAGCAGCA")
    inrepeat = Read("inrepeat", "AGCAGCAGCAGC")
    analyzer.process_mates(flanking, aln("0[10M]1[3M]1[3M]1[2M]"), inrepeat, aln("1[2M]1[3M]1[3M]1[3M]1[1M]", start=1))

    assert analyzer.counts_of_spanning_reads == CountTable()
    assert analyzer.counts_of_flanking_reads == CountTable({2: 1})
    assert analyzer.counts_of_inrepeat_reads == CountTable({3: 1})


def test_process_mates_drops_unconfident(locus, aln, spanning, caplog):
    analyzer = RepeatAnalyzer(locus)
    read, alignment = spanning("good", 3)
    weak = Read("weak", "TCCACAGCAGTTGACCTGAA")

    with caplog.at_level(logging.DEBUG, logger="strgraph-main"):
        analyzer.process_mates(read, alignment, weak, aln("0[4M]1[3M]1[3M]2[10M]", start=6))

    assert analyzer.counts_of_spanning_reads == CountTable({3: 1})
    assert "Could not confidently align weak" in caplog.text


def test_analyze_zero_read_length(locus, spanning):
    analyzer = RepeatAnalyzer(locus)
    for i in range(3):
        read, alignment = spanning(f"read{i}", 60)
        analyzer.process_mates(read, alignment, read, alignment)

    findings = analyzer.analyze(LocusStats(allele_count=AlleleCount.TWO, mean_read_length=0, depth=30.0))

    assert findings.genotype == NoGenotype()
    assert GenotypeFilter.LOW_DEPTH in findings.genotype_filter
    assert findings.counts_of_spanning_reads == CountTable({60: 6})  # not collapsed


def test_analyze_low_coverage(locus, spanning):
    analyzer = RepeatAnalyzer(locus, params=GenotyperParams(min_locus_coverage=10))
    read, alignment = spanning("read", 5)
    analyzer.process_mates(read, alignment, read, alignment)

    findings = analyzer.analyze(LocusStats(allele_count=AlleleCount.TWO, mean_read_length=150, depth=9.5))
    assert not findings.genotype
    assert findings.genotype_filter == GenotypeFilter.LOW_DEPTH


def test_analyze_heterozygous(locus, spanning):
    analyzer = RepeatAnalyzer(locus)
    for i in range(5):
        for n_units in (5, 8):
            read, alignment = spanning(f"read{i}_{n_units}", n_units)
            mate, mate_alignment = spanning(f"mate{i}_{n_units}", n_units)
            analyzer.process_mates(read, alignment, mate, mate_alignment)

    findings = analyzer.analyze(DIPLOID_STATS)

    assert isinstance(findings.genotype, RepeatGenotype)
    assert findings.genotype.allele_sizes == (5, 8)
    assert findings.genotype_filter == GenotypeFilter(0)
    assert findings.allele_count == AlleleCount.TWO
    assert findings.counts_of_spanning_reads == CountTable({5: 10, 8: 10})


def test_analyze_genotype_with_low_breakpoint_support(locus, spanning):
    analyzer = RepeatAnalyzer(locus, params=GenotyperParams(min_breakpoint_spanning_reads=50))
    for i in range(10):
        read, alignment = spanning(f"read{i}", 7)
        analyzer.process_mates(read, alignment, read, alignment)

    findings = analyzer.analyze(DIPLOID_STATS)

    # A genotype and a low depth flag can co-occur
    assert findings.genotype.allele_sizes == (7, 7)
    assert GenotypeFilter.LOW_DEPTH in findings.genotype_filter


def test_analyze_haploid_breakpoint_threshold_is_halved(locus, spanning):
    analyzer = RepeatAnalyzer(locus, params=GenotyperParams(min_breakpoint_spanning_reads=9))
    for i in range(2):
        read, alignment = spanning(f"read{i}", 7)
        analyzer.process_mates(read, alignment, read, alignment)

    haploid = LocusStats(allele_count=AlleleCount.ONE, mean_read_length=150, depth=30.0)
    assert analyzer.analyze(haploid).genotype_filter == GenotypeFilter(0)  # 4 >= 9 // 2
    assert GenotypeFilter.LOW_DEPTH in analyzer.analyze(DIPLOID_STATS).genotype_filter  # 4 < 9


def test_analyze_reports_uncollapsed_tables(locus, spanning):
    analyzer = RepeatAnalyzer(locus)
    for i in range(3):
        read, alignment = spanning(f"read{i}", 5)
        analyzer.process_mates(read, alignment, read, alignment)

    # At most ceil(12 / 3) = 4 units fit in a read
    stats = LocusStats(allele_count=AlleleCount.ONE, mean_read_length=12, depth=30.0)
    findings = analyzer.analyze(stats)

    assert findings.genotype.allele_sizes == (4,)
    assert findings.counts_of_spanning_reads == CountTable({5: 6})
    assert analyzer.counts_of_spanning_reads == CountTable({5: 6})


def test_analyze_no_confident_reads(locus):
    findings = RepeatAnalyzer(locus).analyze(DIPLOID_STATS)
    assert findings.genotype == NoGenotype()
    assert findings.genotype_filter == GenotypeFilter.LOW_DEPTH  # no breakpoint spanning reads


def test_inrepeat_read_pairs(locus, aln):
    analyzer = RepeatAnalyzer(locus)
    flanking = Read("flanking", "ATCGGATCCA" + "CAG" * 50)
    for i in range(4):
        analyzer.process_mates(flanking, aln("0[10M]" + "1[3M]" * 50), flanking, aln("0[10M]" + "1[3M]" * 50))
    for _ in range(15):
        analyzer.add_inrepeat_read_pair()

    assert analyzer.num_inrepeat_read_pairs == 15

    stats = LocusStats(allele_count=AlleleCount.ONE, mean_read_length=150, depth=30.0)
    findings = analyzer.analyze(stats)

    # 30 in-repeat reads at 30x, each adding 50 / 30 units past the 50 units which fit in a read
    assert findings.genotype.allele_sizes == (100,)
    assert findings.num_inrepeat_read_pairs == 15


def test_findings_to_json(locus, spanning):
    analyzer = RepeatAnalyzer(locus)
    read, alignment = spanning("read", 5)
    analyzer.process_mates(read, alignment, read, alignment)

    findings = analyzer.analyze(LocusStats(allele_count=AlleleCount.ONE, mean_read_length=150, depth=30.0))
    d = orjson.loads(findings.to_json())

    assert d["allele_count"] == 1
    assert d["genotype"]["call"] == [5]
    assert d["filter"] == []
    assert d["spanning_reads"] == {"5": 2}
    assert d["flanking_reads"] == {}
    assert orjson.loads(findings.to_json(indent=True)) == d


@pytest.mark.parametrize("sequence,encoding,left,right", [
    ("ATCGGATCCA" + "CAG" * 2, "0[10M]1[3M]1[3M]", 20, 0),
    ("CAG" * 2 + "TTGACCTGAA", "1[3M]1[3M]2[10M]", 0, 20),
])
def test_analyze_needs_both_breakpoints(locus, aln, sequence, encoding, left, right):
    analyzer = RepeatAnalyzer(locus, params=GenotyperParams(min_breakpoint_spanning_reads=1))
    for i in range(10):
        read = Read(f"read{i}", sequence)
        analyzer.process_mates(read, aln(encoding), read, aln(encoding))

    assert analyzer.counts_of_flanking_reads == CountTable({2: 20})
    assert analyzer.alignment_stats.num_reads_spanning_left_breakpoint == left
    assert analyzer.alignment_stats.num_reads_spanning_right_breakpoint == right

    # Plenty of reads cross one breakpoint, but none cross the other
    findings = analyzer.analyze(DIPLOID_STATS)
    assert isinstance(findings.genotype, RepeatGenotype)
    assert GenotypeFilter.LOW_DEPTH in findings.genotype_filter
