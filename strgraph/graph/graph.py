from __future__ import annotations

from typing import Iterable, Sequence

__all__ = [
    "NodeId",
    "Graph",
    "LEFT_FLANK_NODE_ID",
    "REPEAT_NODE_ID",
    "RIGHT_FLANK_NODE_ID",
    "make_str_graph",
]


NodeId = int

# Node layout of a single-repeat locus graph built by make_str_graph.
LEFT_FLANK_NODE_ID: NodeId = 0
REPEAT_NODE_ID: NodeId = 1
RIGHT_FLANK_NODE_ID: NodeId = 2


class Graph:
    """
    A small directed sequence graph. Node IDs are indices into the node sequence list and are topologically ordered,
    i.e. every node with an ID lower than some node X is upstream of X (self loops excepted).
    """

    def __init__(self, node_seqs: Sequence[str], edges: Iterable[tuple[NodeId, NodeId]], name: str = ""):
        self._node_seqs: tuple[str, ...] = tuple(node_seqs)
        self._successors: dict[NodeId, set[NodeId]] = {n: set() for n in range(len(self._node_seqs))}
        self.name: str = name

        for u, v in edges:
            if not (self.has_node(u) and self.has_node(v)):
                raise ValueError(f"edge ({u}, {v}) references a node outside of graph with {self.num_nodes} nodes")
            if v < u:
                raise ValueError(f"edge ({u}, {v}) goes against topological node order")
            self._successors[u].add(v)

    @property
    def num_nodes(self) -> int:
        return len(self._node_seqs)

    def has_node(self, node_id: NodeId) -> bool:
        return 0 <= node_id < len(self._node_seqs)

    def node_seq(self, node_id: NodeId) -> str:
        return self._node_seqs[node_id]

    def node_seq_length(self, node_id: NodeId) -> int:
        return len(self._node_seqs[node_id])

    def has_edge(self, source: NodeId, sink: NodeId) -> bool:
        return sink in self._successors.get(source, ())

    def successors(self, node_id: NodeId) -> frozenset[NodeId]:
        return frozenset(self._successors[node_id])

    def __repr__(self):
        return f"Graph(name={self.name!r}, num_nodes={self.num_nodes})"


def make_str_graph(left_flank: str, repeat_unit: str, right_flank: str, name: str = "") -> Graph:
    """
    Build the graph for a single tandem repeat: left flank -> repeat unit (with a self loop) -> right flank. A bypass
    edge from the left to the right flank represents an allele with zero repeat units.
    """
    return Graph(
        (left_flank, repeat_unit, right_flank),
        (
            (LEFT_FLANK_NODE_ID, REPEAT_NODE_ID),
            (REPEAT_NODE_ID, REPEAT_NODE_ID),
            (REPEAT_NODE_ID, RIGHT_FLANK_NODE_ID),
            (LEFT_FLANK_NODE_ID, RIGHT_FLANK_NODE_ID),
        ),
        name=name,
    )
