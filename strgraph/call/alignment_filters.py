from __future__ import annotations

import operator

from typing import Callable, Optional

from strgraph.graph import GraphAlignment, LinearAlignment, NodeId

from .params import AlignmentFilterParams
from .types import AlignmentType, RepeatAlignmentStats

__all__ = [
    "passes_alignment_filters",
    "is_upstream_alignment_good",
    "is_downstream_alignment_good",
    "is_alignment_confident",
]


DEFAULT_FILTER_PARAMS = AlignmentFilterParams()

# How the two flank signals (upstream good, downstream good) combine into confidence, by alignment type.
#  - a flanking read is informative if anchored on either side
#  - a spanning read defines both repeat boundaries, so both must be anchored
#  - None: flanks are not consulted; the generic filters decide
FlankPolicy = Optional[Callable[[bool, bool], bool]]
FLANK_POLICIES: dict[AlignmentType, FlankPolicy] = {
    AlignmentType.SPANS_REPEAT: operator.and_,
    AlignmentType.FLANKS_REPEAT: operator.or_,
    AlignmentType.INSIDE_REPEAT: None,
    AlignmentType.OUTSIDE_REPEAT: None,
}


def passes_alignment_filters(alignment: GraphAlignment, params: AlignmentFilterParams = DEFAULT_FILTER_PARAMS) -> bool:
    """
    Locus-independent quality check: the query must not be clipped too heavily, and the unclipped portion must be
    mostly matches.
    """

    query_length = alignment.query_length
    if query_length == 0:
        return False

    clipped = alignment.front_softclip_length + alignment.back_softclip_length
    if clipped / query_length > params.max_clipped_fraction:
        return False

    unclipped = query_length - clipped
    return unclipped > 0 and alignment.num_matched / unclipped >= params.min_matched_fraction


def _flank_is_good(flank_alignments: list[LinearAlignment], params: AlignmentFilterParams) -> bool:
    if not flank_alignments:
        return False
    return sum(la.score() for la in flank_alignments) >= params.min_flank_score


def is_upstream_alignment_good(
    repeat_node_id: NodeId, alignment: GraphAlignment, params: AlignmentFilterParams = DEFAULT_FILTER_PARAMS
) -> bool:
    repeat_indexes = alignment.indexes_of_node(repeat_node_id)
    if repeat_indexes:
        upstream = list(alignment.linear_alignments[:repeat_indexes[0]])
    else:
        upstream = [la for n, la in zip(alignment.node_ids, alignment.linear_alignments) if n < repeat_node_id]
    return _flank_is_good(upstream, params)


def is_downstream_alignment_good(
    repeat_node_id: NodeId, alignment: GraphAlignment, params: AlignmentFilterParams = DEFAULT_FILTER_PARAMS
) -> bool:
    repeat_indexes = alignment.indexes_of_node(repeat_node_id)
    if repeat_indexes:
        downstream = list(alignment.linear_alignments[repeat_indexes[-1] + 1:])
    else:
        downstream = [la for n, la in zip(alignment.node_ids, alignment.linear_alignments) if n > repeat_node_id]
    return _flank_is_good(downstream, params)


def is_alignment_confident(
    repeat_node_id: NodeId,
    alignment: GraphAlignment,
    alignment_stats: RepeatAlignmentStats,
    params: AlignmentFilterParams = DEFAULT_FILTER_PARAMS,
) -> bool:
    if not passes_alignment_filters(alignment, params):
        return False

    policy = FLANK_POLICIES[alignment_stats.alignment_type]
    if policy is None:
        return True

    return policy(
        is_upstream_alignment_good(repeat_node_id, alignment, params),
        is_downstream_alignment_good(repeat_node_id, alignment, params),
    )
