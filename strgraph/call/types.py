from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "AlignmentType",
    "AlleleCount",
    "Read",
    "LocusStats",
    "RepeatAlignmentStats",
]


class AlignmentType(Enum):
    SPANS_REPEAT = "spanning"
    FLANKS_REPEAT = "flanking"
    INSIDE_REPEAT = "inrepeat"
    OUTSIDE_REPEAT = "outside"  # unusable for genotyping

    def __str__(self):
        return self.value


class AlleleCount(Enum):
    ONE = 1
    TWO = 2


@dataclass(frozen=True)
class Read:
    read_id: str
    sequence: str


@dataclass(frozen=True)
class LocusStats:
    allele_count: AlleleCount
    mean_read_length: int
    depth: float


@dataclass(frozen=True)
class RepeatAlignmentStats:
    alignment_type: AlignmentType
    num_repeat_units_overlapped: int
