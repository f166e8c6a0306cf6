from __future__ import annotations

from strgraph.graph import GraphAlignment, NodeId

from .types import AlignmentType, RepeatAlignmentStats

__all__ = [
    "AlignmentClassifier",
    "count_full_overlaps",
    "classify_alignment",
]


class AlignmentClassifier:
    """
    Classifies alignments by how they relate to a repeat node. Relies on node IDs being topologically ordered: nodes
    with lower IDs than the repeat node are upstream flank, nodes with higher IDs are downstream flank.
    """

    def __init__(self, repeat_node_id: NodeId):
        self.repeat_node_id: NodeId = repeat_node_id

    def classify(self, alignment: GraphAlignment) -> AlignmentType:
        rn = self.repeat_node_id

        overlaps_upstream = any(n < rn for n in alignment.node_ids)
        overlaps_downstream = any(n > rn for n in alignment.node_ids)

        if overlaps_upstream and overlaps_downstream:
            # Includes alignments taking the bypass edge, i.e. spanning a zero-unit allele.
            return AlignmentType.SPANS_REPEAT

        if alignment.overlaps_node(rn):
            if overlaps_upstream or overlaps_downstream:
                return AlignmentType.FLANKS_REPEAT
            return AlignmentType.INSIDE_REPEAT

        return AlignmentType.OUTSIDE_REPEAT


def count_full_overlaps(node_id: NodeId, alignment: GraphAlignment) -> int:
    """
    Count the visits of a node that cover its entire sequence. Partial visits at the ends of the alignment are not
    counted.
    """
    return sum(1 for i in alignment.indexes_of_node(node_id) if alignment.covers_entire_node(i))


def classify_alignment(classifier: AlignmentClassifier, alignment: GraphAlignment) -> RepeatAlignmentStats:
    return RepeatAlignmentStats(
        alignment_type=classifier.classify(alignment),
        num_repeat_units_overlapped=count_full_overlaps(classifier.repeat_node_id, alignment),
    )
