"""Entropy sources for seed generation."""
import hashlib
import secrets
from abc import ABC, abstractmethod


class EntropySource(ABC):
    """Abstract source of random bytes."""

    @abstractmethod
    def token_bytes(self, n: int) -> bytes:
        """Return n random bytes."""
        pass


class SystemEntropy(EntropySource):
    """
    Production entropy.

    Reads the operating system CSPRNG through `secrets`, no fixed seed.
    """

    def token_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)


class SeededEntropy(EntropySource):
    """
    Simulation entropy.

    Deterministic SHA-256 counter stream, fully controlled by seed, so audit
    runs can be replayed. Anyone who knows the seed can predict every byte:
    never wire this into the HTTP service.
    """

    def __init__(self, seed: str):
        self.seed = seed
        self._counter = 0

    def token_bytes(self, n: int) -> bytes:
        out = b""
        while len(out) < n:
            block = f"{self.seed}:{self._counter}".encode()
            out += hashlib.sha256(block).digest()
            self._counter += 1
        return out[:n]
