import pytest

from strgraph.call import Read, RepeatLocus
from strgraph.graph import decode_graph_alignment

LEFT_FLANK = "ATCGGATCCA"
REPEAT_UNIT = "CAG"
RIGHT_FLANK = "TTGACCTGAA"


@pytest.fixture
def locus() -> RepeatLocus:
    return RepeatLocus.from_sequences("TEST", LEFT_FLANK, REPEAT_UNIT, RIGHT_FLANK)


@pytest.fixture
def aln(locus):
    def _aln(encoding: str, start: int = 0):
        return decode_graph_alignment(start, encoding, locus.graph)
    return _aln


@pytest.fixture
def spanning(aln):
    """Builds a (read, alignment) pair for a read cleanly spanning a repeat of n units."""
    def _spanning(read_id: str, n_units: int):
        read = Read(read_id, LEFT_FLANK + REPEAT_UNIT * n_units + RIGHT_FLANK)
        return read, aln("0[10M]" + "1[3M]" * n_units + "2[10M]")
    return _spanning
