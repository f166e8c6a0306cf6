from __future__ import annotations

from collections import Counter
from typing import Iterable

__all__ = [
    "CountTable",
    "collapse_top_elements",
]


class CountTable:
    """
    Sparse histogram of {repeat unit count: number of reads}. Keys that were never incremented have a count of 0.
    """

    def __init__(self, counts: dict[int, int] | Iterable[tuple[int, int]] | None = None):
        self._counts: Counter[int] = Counter()
        for k, v in (dict(counts) if counts is not None else {}).items():
            if k < 0 or v < 0:
                raise ValueError(f"count tables hold non-negative keys and counts (got {k}: {v})")
            if v:
                self._counts[k] = v

    def increment_count_of(self, element: int) -> None:
        self._counts[element] += 1

    def count_of(self, element: int) -> int:
        return self._counts.get(element, 0)

    def elements_with_nonzero_counts(self) -> list[int]:
        return sorted(k for k, v in self._counts.items() if v > 0)

    def max_element(self) -> int:
        """Largest element with a nonzero count, or 0 for an empty table."""
        return max(self.elements_with_nonzero_counts(), default=0)

    def total_count(self) -> int:
        return sum(self._counts.values())

    def items(self) -> list[tuple[int, int]]:
        return [(k, self._counts[k]) for k in self.elements_with_nonzero_counts()]

    def copy(self) -> CountTable:
        return CountTable(self._counts)

    def to_dict(self) -> dict[int, int]:
        return dict(self.items())

    def __bool__(self):
        return self.total_count() > 0

    def __eq__(self, other):
        if not isinstance(other, CountTable):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self):
        return f"CountTable({self.to_dict()})"


def collapse_top_elements(count_table: CountTable, upper_bound: int) -> CountTable:
    """
    Merge the counts of all elements greater than upper_bound into the count of upper_bound. Reads cannot contain more
    repeat units than fit in one read, so anything above the bound is saturation noise.
    :param count_table: Table to collapse; left unmodified.
    :param upper_bound: Largest element kept in the collapsed table.
    :return: A new, collapsed count table.
    """
    collapsed: dict[int, int] = {}
    for element, count in count_table.items():
        key = min(element, upper_bound)
        collapsed[key] = collapsed.get(key, 0) + count
    return CountTable(collapsed)
