from __future__ import annotations

from .count_table import CountTable, collapse_top_elements
from .findings import GenotypeFilter, RepeatGenotype, NoGenotype, Genotype, VariantFindings, RepeatFindings
from .locus import RepeatLocus
from .params import GenotyperParams, AlignmentFilterParams, load_genotyper_params
from .repeat_analyzer import RepeatAnalyzer
from .types import AlignmentType, AlleleCount, Read, LocusStats, RepeatAlignmentStats

__all__ = [
    "CountTable",
    "collapse_top_elements",
    "GenotypeFilter",
    "RepeatGenotype",
    "NoGenotype",
    "Genotype",
    "VariantFindings",
    "RepeatFindings",
    "RepeatLocus",
    "GenotyperParams",
    "AlignmentFilterParams",
    "load_genotyper_params",
    "RepeatAnalyzer",
    "AlignmentType",
    "AlleleCount",
    "Read",
    "LocusStats",
    "RepeatAlignmentStats",
]
