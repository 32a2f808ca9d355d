"""Seed generation and SHA-256 commitments."""
import hashlib
import hmac
import logging

from fairspin.config import settings
from fairspin.logic.entropy import EntropySource, SystemEntropy
from fairspin.logic.errors import (
    CommitmentError,
    CommitmentMismatch,
    EntropySourceError,
)


logger = logging.getLogger(__name__)


class SeedCommitter:
    """Generates secret seeds and the commitments published before they are used."""

    def __init__(self, entropy: EntropySource | None = None):
        self._entropy = entropy or SystemEntropy()

    def generate_secret_bytes(self, n: int) -> bytes:
        """
        Return exactly n bytes from the entropy source.

        Raises EntropySourceError if the source fails or returns short output.
        There is no retry and no fallback source.
        """
        if n <= 0:
            raise ValueError(f"Byte count must be positive, got {n}")
        try:
            data = self._entropy.token_bytes(n)
        except (OSError, NotImplementedError) as e:
            logger.critical("Entropy source failed: %s", e)
            raise EntropySourceError(f"Entropy source unavailable: {e}") from e
        if not isinstance(data, bytes) or len(data) != n:
            raise EntropySourceError(f"Entropy source returned short output, expected {n} bytes")
        return data

    @staticmethod
    def commit(seed: bytes) -> str:
        """SHA-256 of the raw seed bytes, lowercase hex."""
        try:
            return hashlib.sha256(seed).hexdigest()
        except (TypeError, ValueError) as e:
            raise CommitmentError(f"Cannot hash seed: {e}") from e

    def new_secret(self) -> tuple[bytes, str]:
        """Generate a fresh server seed and its commitment."""
        seed = self.generate_secret_bytes(settings.server_seed_bytes)
        return seed, self.commit(seed)

    def generate_client_seed(self) -> str:
        """Default client seed: random bytes, hex encoded."""
        return self.generate_secret_bytes(settings.client_seed_bytes).hex()

    @classmethod
    def check_commitment(cls, seed: bytes, commitment: str) -> None:
        """Raise CommitmentMismatch unless commitment is the hash of seed."""
        if not hmac.compare_digest(cls.commit(seed), commitment.lower()):
            raise CommitmentMismatch("Stored commitment does not match its seed")
