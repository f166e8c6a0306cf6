import re

from strgraph.exceptions import HintedError

__all__ = [
    "LocusValidationError",
    "valid_motif",
    "validate_repeat_locus",
]

# patterns
RE_VALID_MOTIF = re.compile(r"^[ACGTRYSWKMBDHVN]+$")


# exceptions

class LocusValidationError(HintedError):
    pass


# functions

def valid_motif(motif: str) -> bool:
    """
    Determines whether a motif is valid, i.e., can be used as a repeat unit. Here, valid means "composed of IUPAC
    nucleotide codes and no other characters."
    :param motif: The motif to assess the validity of.
    :return: Whether the motif is valid or not.
    """
    return RE_VALID_MOTIF.match(motif) is not None


def validate_repeat_locus(locus_id: str, left_flank: str, repeat_unit: str, right_flank: str) -> None:
    """
    Validate the sequences which make up a repeat locus graph.
    :param locus_id: Locus ID, for logging errors.
    :param left_flank: Sequence upstream of the repeat.
    :param repeat_unit: Repeat unit sequence (to be validated).
    :param right_flank: Sequence downstream of the repeat.
    """

    if not valid_motif(repeat_unit):
        raise LocusValidationError(
            f"locus {locus_id}: invalid repeat unit: {repeat_unit}",
            "repeat units must contain only valid IUPAC nucleotide codes.",
        )

    for side, flank in (("left", left_flank), ("right", right_flank)):
        if not valid_motif(flank):
            raise LocusValidationError(
                f"locus {locus_id}: invalid {side} flank: '{flank}'",
                "flanks must be non-empty and contain only valid IUPAC nucleotide codes.",
            )
