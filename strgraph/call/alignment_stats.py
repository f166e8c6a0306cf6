from __future__ import annotations

from dataclasses import dataclass

from strgraph.graph import GraphAlignment, NodeId

__all__ = [
    "GraphVariantAlignmentStats",
    "AlignmentStatsCalculator",
]


@dataclass(frozen=True)
class GraphVariantAlignmentStats:
    num_reads_spanning_left_breakpoint: int
    num_reads_spanning_right_breakpoint: int


class AlignmentStatsCalculator:
    """
    Tallies reads which cross the breakpoints of a repeat node, i.e. the edges between the repeat and its flanks.
    A read spans the left breakpoint if its path steps from an upstream node into the repeat node or past it, and
    the right breakpoint if it steps from the repeat node (or an upstream node) into a downstream node.
    """

    def __init__(self, repeat_node_id: NodeId):
        self._repeat_node_id: NodeId = repeat_node_id
        self._num_left: int = 0
        self._num_right: int = 0

    def inspect(self, alignment: GraphAlignment) -> None:
        rn = self._repeat_node_id
        steps = tuple(zip(alignment.node_ids, alignment.node_ids[1:]))

        if any(u < rn <= v for u, v in steps):
            self._num_left += 1
        if any(u <= rn < v for u, v in steps):
            self._num_right += 1

    def get_stats(self) -> GraphVariantAlignmentStats:
        return GraphVariantAlignmentStats(
            num_reads_spanning_left_breakpoint=self._num_left,
            num_reads_spanning_right_breakpoint=self._num_right,
        )
