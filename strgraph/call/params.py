from pathlib import Path
from pydantic import BaseModel, Field

__all__ = [
    "PROP_CORRECT_MOLECULES",
    "AlignmentFilterParams",
    "GenotyperParams",
    "load_genotyper_params",
]

# Probability that a read reports the correct number of repeat units for the allele it came from.
PROP_CORRECT_MOLECULES: float = 0.97


class AlignmentFilterParams(BaseModel):
    # generic filters
    max_clipped_fraction: float = Field(default=0.2, ge=0, le=1)
    min_matched_fraction: float = Field(default=0.8, ge=0, le=1)
    # flank filters: linear alignment score of the sequence upstream/downstream of the repeat
    min_flank_score: int = Field(default=40, ge=0)


class GenotyperParams(BaseModel):
    min_locus_coverage: float = Field(default=10.0, ge=0)
    min_breakpoint_spanning_reads: int = Field(default=1, ge=0)
    alignment_filter: AlignmentFilterParams = Field(default_factory=AlignmentFilterParams)


def load_genotyper_params(path: Path | str) -> GenotyperParams:
    """
    Load genotyper parameters from a JSON file. Missing keys take their default values.
    :param path: String or Path object pointing to a JSON file.
    :return: Validated genotyper parameters.
    """
    with open(path, "r") as fh:
        return GenotyperParams.model_validate_json(fh.read())
