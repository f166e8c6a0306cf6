from .alignment import (
    GraphAlignmentError,
    OperationType,
    Operation,
    LinearAlignment,
    GraphAlignment,
    decode_graph_alignment,
    pretty_print,
)
from .graph import NodeId, Graph, LEFT_FLANK_NODE_ID, REPEAT_NODE_ID, RIGHT_FLANK_NODE_ID, make_str_graph

__all__ = [
    "GraphAlignmentError",
    "OperationType",
    "Operation",
    "LinearAlignment",
    "GraphAlignment",
    "decode_graph_alignment",
    "pretty_print",
    "NodeId",
    "Graph",
    "LEFT_FLANK_NODE_ID",
    "REPEAT_NODE_ID",
    "RIGHT_FLANK_NODE_ID",
    "make_str_graph",
]
