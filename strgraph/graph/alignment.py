from __future__ import annotations

import re

from dataclasses import dataclass, field
from enum import Enum

from strgraph.exceptions import HintedError

from .graph import Graph, NodeId

__all__ = [
    "GraphAlignmentError",
    "OperationType",
    "Operation",
    "LinearAlignment",
    "GraphAlignment",
    "decode_graph_alignment",
    "pretty_print",
]

# patterns
RE_NODE_ALIGNMENT = re.compile(r"(\d+)\[([^\[\]]*)\]")
RE_CIGAR_OP = re.compile(r"(\d+)([MXIDS])")

# linear scoring used for flank quality
MATCH_SCORE = 5
MISMATCH_SCORE = -4
GAP_SCORE = -8


# exceptions

class GraphAlignmentError(HintedError):
    pass


# types

class OperationType(Enum):
    MATCH = "M"
    MISMATCH = "X"
    INSERTION = "I"
    DELETION = "D"
    SOFTCLIP = "S"


_QUERY_CONSUMING = frozenset({OperationType.MATCH, OperationType.MISMATCH, OperationType.INSERTION,
                              OperationType.SOFTCLIP})
_REFERENCE_CONSUMING = frozenset({OperationType.MATCH, OperationType.MISMATCH, OperationType.DELETION})


@dataclass(frozen=True)
class Operation:
    type: OperationType
    length: int

    @property
    def query_length(self) -> int:
        return self.length if self.type in _QUERY_CONSUMING else 0

    @property
    def reference_length(self) -> int:
        return self.length if self.type in _REFERENCE_CONSUMING else 0

    def __str__(self):
        return f"{self.length}{self.type.value}"


@dataclass(frozen=True)
class LinearAlignment:
    """Alignment of a stretch of the query to a single graph node, as a sequence of CIGAR-like operations."""

    operations: tuple[Operation, ...]

    def _sum_of(self, *op_types: OperationType) -> int:
        return sum(op.length for op in self.operations if op.type in op_types)

    @property
    def query_length(self) -> int:
        return sum(op.query_length for op in self.operations)

    @property
    def reference_length(self) -> int:
        return sum(op.reference_length for op in self.operations)

    @property
    def num_matched(self) -> int:
        return self._sum_of(OperationType.MATCH)

    @property
    def num_mismatched(self) -> int:
        return self._sum_of(OperationType.MISMATCH)

    @property
    def num_indel_bases(self) -> int:
        return self._sum_of(OperationType.INSERTION, OperationType.DELETION)

    @property
    def num_clipped(self) -> int:
        return self._sum_of(OperationType.SOFTCLIP)

    def score(self) -> int:
        return self.num_matched * MATCH_SCORE + self.num_mismatched * MISMATCH_SCORE + self.num_indel_bases * GAP_SCORE

    def __str__(self):
        return "".join(map(str, self.operations))


@dataclass(frozen=True)
class GraphAlignment:
    """
    Alignment of a query sequence along a path through a graph. The path begins at offset path_start of the first
    node; every subsequent node is entered at offset 0. There is one linear alignment per node visit.
    """

    path_start: int
    node_ids: tuple[NodeId, ...]
    linear_alignments: tuple[LinearAlignment, ...]
    graph: Graph = field(compare=False, repr=False)

    def __len__(self):
        return len(self.node_ids)

    def __getitem__(self, index: int) -> LinearAlignment:
        return self.linear_alignments[index]

    @property
    def first_node_id(self) -> NodeId:
        return self.node_ids[0]

    @property
    def last_node_id(self) -> NodeId:
        return self.node_ids[-1]

    @property
    def path_end(self) -> int:
        """Exclusive end offset of the alignment on the last node of the path."""
        last_start = self.path_start if len(self.node_ids) == 1 else 0
        return last_start + self.linear_alignments[-1].reference_length

    @property
    def query_length(self) -> int:
        return sum(la.query_length for la in self.linear_alignments)

    @property
    def reference_length(self) -> int:
        return sum(la.reference_length for la in self.linear_alignments)

    @property
    def num_matched(self) -> int:
        return sum(la.num_matched for la in self.linear_alignments)

    @property
    def front_softclip_length(self) -> int:
        ops = self.linear_alignments[0].operations
        return ops[0].length if ops and ops[0].type == OperationType.SOFTCLIP else 0

    @property
    def back_softclip_length(self) -> int:
        ops = self.linear_alignments[-1].operations
        return ops[-1].length if ops and ops[-1].type == OperationType.SOFTCLIP else 0

    def indexes_of_node(self, node_id: NodeId) -> list[int]:
        return [i for i, n in enumerate(self.node_ids) if n == node_id]

    def overlaps_node(self, node_id: NodeId) -> bool:
        return node_id in self.node_ids

    def node_start(self, index: int) -> int:
        return self.path_start if index == 0 else 0

    def node_end(self, index: int) -> int:
        return self.node_start(index) + self.linear_alignments[index].reference_length

    def covers_entire_node(self, index: int) -> bool:
        return (self.node_start(index) == 0 and
                self.node_end(index) == self.graph.node_seq_length(self.node_ids[index]))

    def encode(self) -> str:
        return "".join(f"{n}[{la}]" for n, la in zip(self.node_ids, self.linear_alignments))

    def __str__(self):
        return f"{self.path_start}:{self.encode()}"


def _decode_linear_alignment(encoding: str) -> LinearAlignment:
    ops = RE_CIGAR_OP.findall(encoding)
    if "".join(f"{length}{op}" for length, op in ops) != encoding or not ops:
        raise GraphAlignmentError(
            f"malformed linear alignment encoding: '{encoding}'",
            "linear alignments must be non-empty runs of <length><op> with op one of M, X, I, D, S",
        )
    return LinearAlignment(tuple(Operation(OperationType(op), int(length)) for length, op in ops))


def decode_graph_alignment(first_node_start: int, encoding: str, graph: Graph) -> GraphAlignment:
    """
    Decode a graph alignment from its string encoding, e.g. 0[4M]1[3M]1[3M]2[2M1X].
    :param first_node_start: Offset on the first node at which the alignment begins.
    :param encoding: Concatenated <node id>[<operations>] blocks, one per node visit.
    :param graph: Graph that the alignment refers to.
    :return: The decoded, validated graph alignment.
    """

    blocks = RE_NODE_ALIGNMENT.findall(encoding)
    if not blocks or "".join(f"{n}[{e}]" for n, e in blocks) != encoding:
        raise GraphAlignmentError(
            f"malformed graph alignment encoding: '{encoding}'",
            "graph alignments are encoded as <node id>[<operations>] blocks, e.g. 0[4M]1[3M]2[5M]",
        )

    node_ids = tuple(int(n) for n, _ in blocks)
    linear_alignments = tuple(_decode_linear_alignment(e) for _, e in blocks)

    for i, node_id in enumerate(node_ids):
        if not graph.has_node(node_id):
            raise GraphAlignmentError(
                f"alignment {encoding} visits node {node_id}, which is not in {graph!r}",
                "node IDs must index into the locus graph",
            )
        if i > 0 and not graph.has_edge(node_ids[i - 1], node_id):
            raise GraphAlignmentError(
                f"alignment {encoding} traverses missing edge ({node_ids[i - 1]}, {node_id})",
                "consecutive node visits must be connected by a graph edge",
            )

        start = first_node_start if i == 0 else 0
        end = start + linear_alignments[i].reference_length
        node_length = graph.node_seq_length(node_id)
        if start < 0 or end > node_length or (i < len(node_ids) - 1 and end != node_length):
            raise GraphAlignmentError(
                f"alignment {encoding} covers [{start}, {end}) of node {node_id} with length {node_length}",
                "every node visit except the last must reach the end of its node",
            )

    return GraphAlignment(first_node_start, node_ids, linear_alignments, graph)


def pretty_print(alignment: GraphAlignment, query: str) -> str:
    """
    Render an alignment as three lines: reference, match bars, and query. Node boundaries are marked with ':'.
    """

    ref_parts: list[str] = []
    bar_parts: list[str] = []
    query_parts: list[str] = []
    query_pos = 0

    for i, (node_id, la) in enumerate(zip(alignment.node_ids, alignment.linear_alignments)):
        node_seq = alignment.graph.node_seq(node_id)
        ref_pos = alignment.node_start(i)
        r, b, q = [], [], []

        for op in la.operations:
            q_seg = query[query_pos:query_pos + op.query_length]
            r_seg = node_seq[ref_pos:ref_pos + op.reference_length]
            gap = " " * op.length

            if op.type == OperationType.MATCH:
                segs = (r_seg, "|" * op.length, q_seg)
            elif op.type == OperationType.MISMATCH:
                segs = (r_seg, gap, q_seg)
            elif op.type == OperationType.INSERTION:
                segs = ("-" * op.length, gap, q_seg)
            elif op.type == OperationType.DELETION:
                segs = (r_seg, gap, "-" * op.length)
            else:  # soft clip
                segs = (gap, gap, q_seg.lower())

            r.append(segs[0])
            b.append(segs[1])
            q.append(segs[2])
            query_pos += op.query_length
            ref_pos += op.reference_length

        ref_parts.append("".join(r))
        bar_parts.append("".join(b))
        query_parts.append("".join(q))

    return "\n".join((":".join(ref_parts), ":".join(bar_parts), ":".join(query_parts)))
