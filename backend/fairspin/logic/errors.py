"""Domain exceptions for seed generation, commitment and outcome sampling.

Every exception here is fatal for the spin that raised it: none of them may be
answered by falling back to weaker randomness or a biased outcome.
"""


class FairnessError(Exception):
    """Base class for provably-fair RNG failures."""


class EntropySourceError(FairnessError):
    """The cryptographic entropy source failed or returned short output."""


class CommitmentError(FairnessError):
    """A seed commitment could not be computed."""


class CommitmentMismatch(FairnessError):
    """A stored commitment does not match the hash of its paired seed."""


class EntropyExhaustion(FairnessError):
    """Rejection sampling ran out of extension rounds."""


class EpochStateError(FairnessError):
    """An epoch was used outside its COMMITTED -> REVEALED lifecycle."""
