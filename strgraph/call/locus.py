from __future__ import annotations

from dataclasses import dataclass

from strgraph.graph import Graph, NodeId, REPEAT_NODE_ID, make_str_graph

from .validation import validate_repeat_locus

__all__ = [
    "RepeatLocus",
]


@dataclass(frozen=True)
class RepeatLocus:
    locus_id: str
    repeat_unit: str
    graph: Graph
    repeat_node_id: NodeId

    @property
    def repeat_unit_length(self) -> int:
        return len(self.repeat_unit)

    @classmethod
    def from_sequences(cls, locus_id: str, left_flank: str, repeat_unit: str, right_flank: str) -> RepeatLocus:
        left_flank, repeat_unit, right_flank = left_flank.upper(), repeat_unit.upper(), right_flank.upper()
        validate_repeat_locus(locus_id, left_flank, repeat_unit, right_flank)
        return cls(
            locus_id=locus_id,
            repeat_unit=repeat_unit,
            graph=make_str_graph(left_flank, repeat_unit, right_flank, name=locus_id),
            repeat_node_id=REPEAT_NODE_ID,
        )
