from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Flag, auto
from typing import Union

import orjson

from .count_table import CountTable
from .types import AlleleCount

__all__ = [
    "GenotypeFilter",
    "RepeatGenotype",
    "NoGenotype",
    "Genotype",
    "VariantFindings",
    "RepeatFindings",
]


class GenotypeFilter(Flag):
    """Independent quality concerns about a genotype. GenotypeFilter(0) means no concerns."""
    LOW_DEPTH = auto()

    def names(self) -> list[str]:
        return [f.name for f in GenotypeFilter if f in self]


@dataclass(frozen=True)
class RepeatGenotype:
    repeat_unit_length: int
    allele_sizes: tuple[int, ...]  # In repeat units, ascending
    allele_size_cis: tuple[tuple[int, int], ...]  # (lower, upper) per allele

    def __post_init__(self):
        if len(self.allele_sizes) not in (1, 2):
            raise ValueError(f"repeat genotypes have one or two alleles (got {self.allele_sizes})")
        if list(self.allele_sizes) != sorted(self.allele_sizes):
            raise ValueError(f"allele sizes must be sorted (got {self.allele_sizes})")
        if len(self.allele_size_cis) != len(self.allele_sizes):
            raise ValueError("need exactly one confidence interval per allele")
        for size, (lower, upper) in zip(self.allele_sizes, self.allele_size_cis):
            if not lower <= size <= upper:
                raise ValueError(f"allele size {size} lies outside of its confidence interval ({lower}, {upper})")

    @property
    def num_alleles(self) -> int:
        return len(self.allele_sizes)

    @property
    def short_allele_size(self) -> int:
        return self.allele_sizes[0]

    @property
    def long_allele_size(self) -> int:
        return self.allele_sizes[-1]

    @property
    def allele_sizes_bp(self) -> tuple[int, ...]:
        return tuple(s * self.repeat_unit_length for s in self.allele_sizes)

    def to_dict(self) -> dict:
        return {
            "repeat_unit_length": self.repeat_unit_length,
            "call": list(self.allele_sizes),
            "call_cis": [list(ci) for ci in self.allele_size_cis],
        }

    def __str__(self):
        return "/".join(map(str, self.allele_sizes))


@dataclass(frozen=True)
class NoGenotype:
    """Absence of a genotype; there was not enough evidence to call one."""

    def __bool__(self):
        return False

    def to_dict(self) -> None:
        return None

    def __str__(self):
        return "."


Genotype = Union[RepeatGenotype, NoGenotype]


class VariantFindings(ABC):
    genotype_filter: GenotypeFilter

    @abstractmethod
    def to_dict(self) -> dict:
        pass


@dataclass(frozen=True)
class RepeatFindings(VariantFindings):
    counts_of_spanning_reads: CountTable
    counts_of_flanking_reads: CountTable
    counts_of_inrepeat_reads: CountTable
    allele_count: AlleleCount
    genotype: Genotype
    genotype_filter: GenotypeFilter
    num_inrepeat_read_pairs: int = 0

    def to_dict(self) -> dict:
        return {
            "allele_count": self.allele_count.value,
            "genotype": self.genotype.to_dict(),
            "filter": self.genotype_filter.names(),
            "spanning_reads": self.counts_of_spanning_reads.to_dict(),
            "flanking_reads": self.counts_of_flanking_reads.to_dict(),
            "inrepeat_reads": self.counts_of_inrepeat_reads.to_dict(),
            "inrepeat_read_pairs": self.num_inrepeat_read_pairs,
        }

    def to_json(self, indent: bool = False) -> bytes:
        # Count tables are keyed by int
        option = orjson.OPT_NON_STR_KEYS | (orjson.OPT_INDENT_2 if indent else 0)
        return orjson.dumps(self.to_dict(), option=option)
