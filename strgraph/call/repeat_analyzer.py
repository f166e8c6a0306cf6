from __future__ import annotations

import logging
import math

from strgraph.graph import GraphAlignment, NodeId, pretty_print
from strgraph.logger import get_main_logger

from .alignment_filters import is_alignment_confident
from .alignment_stats import AlignmentStatsCalculator, GraphVariantAlignmentStats
from .classifier import AlignmentClassifier, classify_alignment
from .count_table import CountTable, collapse_top_elements
from .findings import Genotype, GenotypeFilter, NoGenotype, RepeatFindings
from .genotyper import GenotypeScorer, RepeatGenotyper
from .locus import RepeatLocus
from .params import PROP_CORRECT_MOLECULES, GenotyperParams
from .types import AlignmentType, AlleleCount, LocusStats, Read, RepeatAlignmentStats

__all__ = [
    "generate_candidate_allele_sizes",
    "calculate_haplotype_depth",
    "calculate_min_breakpoint_spanning_reads",
    "RepeatAnalyzer",
]


def generate_candidate_allele_sizes(
    spanning_table: CountTable, flanking_table: CountTable, inrepeat_table: CountTable
) -> list[int]:
    """
    Candidate allele sizes are all sizes seen in spanning reads, plus the longest size seen in flanking or in-repeat
    reads if that is longer than any spanning read; this covers alleles too long for any read to span.
    """

    candidate_sizes = spanning_table.elements_with_nonzero_counts()
    longest_spanning = max(candidate_sizes, default=0)
    longest_non_spanning = max(flanking_table.max_element(), inrepeat_table.max_element())

    if longest_spanning < longest_non_spanning:
        candidate_sizes.append(longest_non_spanning)

    return candidate_sizes


def calculate_haplotype_depth(depth: float, allele_count: AlleleCount) -> float:
    # Coverage splits evenly between homologous chromosomes
    return depth / 2 if allele_count == AlleleCount.TWO else depth


def calculate_min_breakpoint_spanning_reads(min_breakpoint_spanning_reads: int, allele_count: AlleleCount) -> int:
    if allele_count == AlleleCount.TWO:
        return min_breakpoint_spanning_reads
    return min_breakpoint_spanning_reads // 2


class RepeatAnalyzer:
    """
    Accumulates read evidence for a single repeat locus and genotypes it. Not safe for concurrent writers; use one
    analyzer per locus, and process each locus's reads sequentially.
    """

    def __init__(
        self,
        locus: RepeatLocus,
        params: GenotyperParams | None = None,
        logger: logging.Logger | None = None,
        scorer: GenotypeScorer | None = None,
    ):
        self._locus: RepeatLocus = locus
        self._params: GenotyperParams = params or GenotyperParams()
        self._logger: logging.Logger = logger or get_main_logger()
        self._scorer: GenotypeScorer | None = scorer

        self._classifier = AlignmentClassifier(locus.repeat_node_id)
        self._alignment_stats_calculator = AlignmentStatsCalculator(locus.repeat_node_id)

        self.counts_of_spanning_reads = CountTable()
        self.counts_of_flanking_reads = CountTable()
        self.counts_of_inrepeat_reads = CountTable()
        self.num_inrepeat_read_pairs: int = 0

    @property
    def variant_id(self) -> str:
        return self._locus.locus_id

    @property
    def repeat_node_id(self) -> NodeId:
        return self._locus.repeat_node_id

    @property
    def alignment_stats(self) -> GraphVariantAlignmentStats:
        return self._alignment_stats_calculator.get_stats()

    def classify_read_alignment(self, alignment: GraphAlignment) -> RepeatAlignmentStats:
        return classify_alignment(self._classifier, alignment)

    def _process_alignment(self, read: Read, alignment: GraphAlignment) -> None:
        alignment_stats = self.classify_read_alignment(alignment)

        if not is_alignment_confident(
                self.repeat_node_id, alignment, alignment_stats, self._params.alignment_filter):
            self._logger.debug(
                "Could not confidently align %s to repeat node %d of %s\n%s",
                read.read_id, self.repeat_node_id, self.variant_id, pretty_print(alignment, read.sequence))
            return

        self._logger.debug("%s is %s for variant %s", read.read_id, alignment_stats.alignment_type, self.variant_id)
        self._alignment_stats_calculator.inspect(alignment)
        self.summarize_alignment_to_read_counts(alignment_stats)

    def process_mates(
        self, read: Read, read_alignment: GraphAlignment, mate: Read, mate_alignment: GraphAlignment
    ) -> None:
        # Mates are classified and filtered independently; pairs lying entirely in the repeat are recorded separately
        # through add_inrepeat_read_pair.
        self._process_alignment(read, read_alignment)
        self._process_alignment(mate, mate_alignment)

    def add_inrepeat_read_pair(self) -> None:
        self.num_inrepeat_read_pairs += 1

    def summarize_alignment_to_read_counts(self, alignment_stats: RepeatAlignmentStats) -> None:
        alignment_type = alignment_stats.alignment_type
        n = alignment_stats.num_repeat_units_overlapped

        if alignment_type == AlignmentType.SPANS_REPEAT:
            self.counts_of_spanning_reads.increment_count_of(n)
        elif alignment_type == AlignmentType.FLANKS_REPEAT:
            self.counts_of_flanking_reads.increment_count_of(n)
        elif alignment_type == AlignmentType.INSIDE_REPEAT:
            self.counts_of_inrepeat_reads.increment_count_of(n)
        # Otherwise, the alignment doesn't tell us anything about the repeat

    def analyze(self, stats: LocusStats) -> RepeatFindings:
        genotype: Genotype = NoGenotype()
        genotype_filter = GenotypeFilter(0)

        if stats.mean_read_length == 0 or stats.depth < self._params.min_locus_coverage:
            self._logger.debug(
                "%s: skipping genotyping (mean read length %d, depth %.2f)",
                self.variant_id, stats.mean_read_length, stats.depth)
            genotype_filter |= GenotypeFilter.LOW_DEPTH
        else:
            repeat_unit_length = self._locus.repeat_unit_length
            max_num_units_in_read = math.ceil(stats.mean_read_length / repeat_unit_length)

            spanning_table = collapse_top_elements(self.counts_of_spanning_reads, max_num_units_in_read)
            flanking_table = collapse_top_elements(self.counts_of_flanking_reads, max_num_units_in_read)
            inrepeat_table = collapse_top_elements(self.counts_of_inrepeat_reads, max_num_units_in_read)

            candidate_allele_sizes = generate_candidate_allele_sizes(spanning_table, flanking_table, inrepeat_table)

            haplotype_depth = calculate_haplotype_depth(stats.depth, stats.allele_count)
            min_breakpoint_spanning_reads = calculate_min_breakpoint_spanning_reads(
                self._params.min_breakpoint_spanning_reads, stats.allele_count)

            repeat_genotyper = RepeatGenotyper(
                haplotype_depth,
                stats.allele_count,
                repeat_unit_length,
                max_num_units_in_read,
                PROP_CORRECT_MOLECULES,
                spanning_table,
                flanking_table,
                inrepeat_table,
                self.num_inrepeat_read_pairs,
                scorer=self._scorer,
            )
            genotype = repeat_genotyper.genotype_repeat(candidate_allele_sizes)
            self._logger.debug(
                "%s: candidate allele sizes %s; genotype %s", self.variant_id, candidate_allele_sizes, genotype)

            alignment_stats = self.alignment_stats
            if (alignment_stats.num_reads_spanning_left_breakpoint < min_breakpoint_spanning_reads or
                    alignment_stats.num_reads_spanning_right_breakpoint < min_breakpoint_spanning_reads):
                genotype_filter |= GenotypeFilter.LOW_DEPTH

        return RepeatFindings(
            counts_of_spanning_reads=self.counts_of_spanning_reads.copy(),
            counts_of_flanking_reads=self.counts_of_flanking_reads.copy(),
            counts_of_inrepeat_reads=self.counts_of_inrepeat_reads.copy(),
            allele_count=stats.allele_count,
            genotype=genotype,
            genotype_filter=genotype_filter,
            num_inrepeat_read_pairs=self.num_inrepeat_read_pairs,
        )
