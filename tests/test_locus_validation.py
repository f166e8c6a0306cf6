import logging
import pytest

from strgraph.call.locus import RepeatLocus
from strgraph.call.validation import LocusValidationError, valid_motif, validate_repeat_locus
from strgraph.exceptions import HintedError


@pytest.mark.parametrize("motif,valid", [
    ("CAG", True),
    ("CAGN", True),
    ("CAGX", False),
    ("(CAG)n", False),
    ("XX", False),
    ("", False),
])
def test_valid_motif(motif, valid):
    assert valid_motif(motif) == valid


def test_validate_repeat_locus():
    validate_repeat_locus("ok", "ATCG", "CAG", "TTGA")

    with pytest.raises(LocusValidationError):
        # invalid repeat unit
        validate_repeat_locus("bad", "ATCG", "(CAG)n", "TTGA")

    with pytest.raises(LocusValidationError):
        # empty flank
        validate_repeat_locus("bad", "", "CAG", "TTGA")

    with pytest.raises(LocusValidationError):
        validate_repeat_locus("bad", "ATCG", "CAG", "TT-GA")


def test_locus_validation_error_logging(caplog):
    logger = logging.getLogger("test-locus-validation")
    with pytest.raises(LocusValidationError) as e:
        validate_repeat_locus("HTT", "ATCG", "CAGX", "TTGA")

    with caplog.at_level(logging.CRITICAL, logger="test-locus-validation"):
        e.value.log_error(logger)

    assert "locus HTT: invalid repeat unit: CAGX" in caplog.text
    assert "IUPAC" in caplog.text
    assert isinstance(e.value, HintedError)


def test_repeat_locus_from_sequences():
    locus = RepeatLocus.from_sequences("HTT", "atcg", "cag", "ttga")
    assert locus.repeat_unit == "CAG"
    assert locus.repeat_unit_length == 3
    assert locus.graph.node_seq(locus.repeat_node_id) == "CAG"
    assert locus.graph.name == "HTT"

    with pytest.raises(LocusValidationError):
        RepeatLocus.from_sequences("HTT", "ATCG", "", "TTGA")
