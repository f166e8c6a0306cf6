from __future__ import annotations

import itertools
import math
import numpy as np

from dataclasses import dataclass
from numpy.typing import NDArray
from scipy.special import logsumexp
from scipy.stats import chi2, poisson
from typing import Protocol, Sequence

from .count_table import CountTable
from .findings import Genotype, NoGenotype, RepeatGenotype
from .types import AlleleCount

__all__ = [
    "GenotyperModelParams",
    "ReadCountTables",
    "GenotypeScorer",
    "ReadCountLikelihoodModel",
    "RepeatGenotyper",
]


# Log-likelihood drop (from the best genotype) which still lies within a 95% confidence interval for one allele.
CI_LOG_LIKELIHOOD_DROP = chi2.ppf(0.95, 1) / 2
CI_PERCENTILE_RANGE = (0.025, 0.975)

# Per unit of distance between an observed and a true allele size, the chance of a misclassified read halves.
STUTTER_DECAY = 0.5
LOG_STUTTER_DECAY = math.log(STUTTER_DECAY)

# Floor for expected read counts, so that log-likelihoods of genotypes predicting no reads stay finite.
MIN_EXPECTED_READS = 0.01


@dataclass(frozen=True)
class GenotyperModelParams:
    haplotype_depth: float
    allele_count: AlleleCount
    repeat_unit_length: int
    max_num_units_in_read: int
    prop_correct_molecules: float

    @property
    def read_length(self) -> int:
        # The saturation cap is ceil(read length / unit length), so this overestimates read length by < 1 unit.
        return self.max_num_units_in_read * self.repeat_unit_length


@dataclass(frozen=True)
class ReadCountTables:
    spanning: CountTable
    flanking: CountTable
    inrepeat: CountTable
    num_inrepeat_read_pairs: int = 0

    @property
    def num_inrepeat_reads(self) -> int:
        # Both mates of an in-repeat read pair are in-repeat reads.
        return self.inrepeat.total_count() + 2 * self.num_inrepeat_read_pairs


class GenotypeScorer(Protocol):
    def score(self, candidate_sizes: Sequence[int], tables: ReadCountTables, params: GenotyperModelParams) -> Genotype:
        ...


def _table_arrays(table: CountTable) -> tuple[NDArray[np.int_], NDArray[np.int_]]:
    items = table.items()
    return np.array([k for k, _ in items], dtype=np.int_), np.array([v for _, v in items], dtype=np.int_)


class ReadCountLikelihoodModel:
    """
    Scores genotypes by the likelihood of the observed repeat unit counts:

     - a spanning read reports the true allele size with probability p, and otherwise a size which is off by d units
       with probability (1 - p) * 0.5^d / 2;
     - a flanking or in-repeat read reports, with probability p, any size between 0 and the allele size (capped at
       the units which fit in a read) with equal chance, and otherwise overshoots by d units with probability
       (1 - p) * 0.5^d;
     - each read comes from one of the haplotypes with equal chance;
     - the total number of spanning reads is Poisson-distributed, with a mean given by how many positions a read
       could start at and still span each haplotype's repeat;
     - the number of in-repeat reads (two per in-repeat read pair) is Poisson-distributed, with a mean of
       depth * (allele bp - read length) / read length per haplotype. Alleles at the saturation cap may be any length
       beyond it, so they take the length which best explains the in-repeat reads.

    All per-read terms are computed in log space. Alleles at the saturation cap are then extended using the number of
    in-repeat reads.
    """

    @staticmethod
    def spanning_read_log_likelihoods(
        obs: NDArray[np.int_], allele_size: int, params: GenotyperModelParams
    ) -> NDArray[np.float64]:
        p = params.prop_correct_molecules
        dist = np.abs(obs - allele_size)
        return np.where(dist == 0, np.log(p), np.log1p(-p) + dist * LOG_STUTTER_DECAY - np.log(2))

    @staticmethod
    def flanking_read_log_likelihoods(
        obs: NDArray[np.int_], allele_size: int, params: GenotyperModelParams
    ) -> NDArray[np.float64]:
        p = params.prop_correct_molecules
        support = min(allele_size, params.max_num_units_in_read) + 1
        overshoot = np.maximum(obs - allele_size, 0)
        return np.where(overshoot == 0, np.log(p / support), np.log1p(-p) + overshoot * LOG_STUTTER_DECAY)

    @staticmethod
    def expected_spanning_reads(genotype: tuple[int, ...], params: GenotyperModelParams) -> float:
        hd = params.haplotype_depth
        read_len = params.read_length
        return sum(
            hd * max(read_len - a * params.repeat_unit_length, 0) / read_len for a in genotype
        ) + MIN_EXPECTED_READS

    @staticmethod
    def expected_inrepeat_reads(
        genotype: tuple[int, ...], tables: ReadCountTables, params: GenotyperModelParams
    ) -> float:
        hd = params.haplotype_depth
        read_len = params.read_length
        cap = params.max_num_units_in_read

        expected = sum(
            hd * max(a * params.repeat_unit_length - read_len, 0) / read_len for a in genotype if a < cap
        )
        if any(a >= cap for a in genotype):
            # The length of a saturated allele is free, so its rate is fitted to the observed reads
            expected += tables.num_inrepeat_reads

        return expected + MIN_EXPECTED_READS

    def log_likelihood(self, genotype: tuple[int, ...], tables: ReadCountTables, params: GenotyperModelParams) -> float:
        ll = 0.0
        log_num_haplotypes = math.log(len(genotype))

        for table, read_ll_fn in (
            (tables.spanning, self.spanning_read_log_likelihoods),
            (tables.flanking, self.flanking_read_log_likelihoods),
            (tables.inrepeat, self.flanking_read_log_likelihoods),
        ):
            obs, counts = _table_arrays(table)
            if obs.size == 0:
                continue
            # Average over haplotypes, since each read comes from one of them
            read_ll = logsumexp([read_ll_fn(obs, a, params) for a in genotype], axis=0) - log_num_haplotypes
            ll += float(np.sum(counts * read_ll))

        ll += float(poisson.logpmf(tables.spanning.total_count(), self.expected_spanning_reads(genotype, params)))
        ll += float(poisson.logpmf(tables.num_inrepeat_reads, self.expected_inrepeat_reads(genotype, tables, params)))
        return ll

    def _allele_ci(
        self,
        genotype: tuple[int, ...],
        index: int,
        best_ll: float,
        tables: ReadCountTables,
        params: GenotyperModelParams,
    ) -> tuple[int, int]:
        in_ci = [
            size for size in range(params.max_num_units_in_read + 1)
            if self.log_likelihood(genotype[:index] + (size,) + genotype[index + 1:], tables, params)
            >= best_ll - CI_LOG_LIKELIHOOD_DROP
        ]
        size = genotype[index]
        return min(in_ci + [size]), max(in_ci + [size])

    @staticmethod
    def _extend_saturated(
        genotype: tuple[int, ...], cis: list[tuple[int, int]], tables: ReadCountTables, params: GenotyperModelParams
    ) -> tuple[list[int], list[tuple[int, int]]]:
        cap = params.max_num_units_in_read
        hd = params.haplotype_depth
        sizes = list(genotype)
        saturated = [i for i, a in enumerate(genotype) if a >= cap]

        if not saturated or hd <= 0 or tables.num_inrepeat_reads == 0:
            return sizes, cis

        # A haplotype of L bp yields ~ depth * (L - read length) / read length reads lying entirely in the repeat,
        # i.e. every in-repeat read adds (read length / depth) / unit length = cap / depth units beyond the cap.
        reads_per_allele = tables.num_inrepeat_reads / len(saturated)
        units_per_read = cap / hd
        lo_reads, hi_reads = (float(poisson.ppf(q, reads_per_allele)) for q in CI_PERCENTILE_RANGE)

        for i in saturated:
            sizes[i] = cap + int(round(reads_per_allele * units_per_read))
            lower = cap + int(math.floor(lo_reads * units_per_read))
            upper = cap + int(math.ceil(hi_reads * units_per_read))
            cis[i] = (min(lower, sizes[i]), max(upper, sizes[i]))

        return sizes, cis

    def score(self, candidate_sizes: Sequence[int], tables: ReadCountTables, params: GenotyperModelParams) -> Genotype:
        candidates = sorted(set(candidate_sizes))
        if not candidates:
            return NoGenotype()

        genotypes = list(itertools.combinations_with_replacement(candidates, params.allele_count.value))
        log_likelihoods = np.array([self.log_likelihood(g, tables, params) for g in genotypes])

        # argmax returns the first maximum, so ties go to the genotype with the smaller alleles
        best_idx = int(np.argmax(log_likelihoods))
        best = genotypes[best_idx]
        best_ll = float(log_likelihoods[best_idx])

        cis = [self._allele_ci(best, i, best_ll, tables, params) for i in range(len(best))]
        sizes, cis = self._extend_saturated(best, cis, tables, params)

        ordered = sorted(zip(sizes, cis))
        return RepeatGenotype(
            repeat_unit_length=params.repeat_unit_length,
            allele_sizes=tuple(s for s, _ in ordered),
            allele_size_cis=tuple(ci for _, ci in ordered),
        )


class RepeatGenotyper:
    def __init__(
        self,
        haplotype_depth: float,
        allele_count: AlleleCount,
        repeat_unit_length: int,
        max_num_units_in_read: int,
        prop_correct_molecules: float,
        counts_of_spanning_reads: CountTable,
        counts_of_flanking_reads: CountTable,
        counts_of_inrepeat_reads: CountTable,
        num_inrepeat_read_pairs: int,
        scorer: GenotypeScorer | None = None,
    ):
        self.params = GenotyperModelParams(
            haplotype_depth=haplotype_depth,
            allele_count=allele_count,
            repeat_unit_length=repeat_unit_length,
            max_num_units_in_read=max_num_units_in_read,
            prop_correct_molecules=prop_correct_molecules,
        )
        self.tables = ReadCountTables(
            spanning=counts_of_spanning_reads,
            flanking=counts_of_flanking_reads,
            inrepeat=counts_of_inrepeat_reads,
            num_inrepeat_read_pairs=num_inrepeat_read_pairs,
        )
        self._scorer: GenotypeScorer = scorer or ReadCountLikelihoodModel()

    def genotype_repeat(self, candidate_allele_sizes: Sequence[int]) -> Genotype:
        return self._scorer.score(candidate_allele_sizes, self.tables, self.params)
