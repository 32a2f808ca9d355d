"""
Outcome derivation: (server seed, client seed, nonce) -> roulette number.

This is the whole public algorithm; an independent implementation that
follows these steps agrees bit for bit:

1. message = UTF-8 of "<client_seed>:<nonce>" (nonce in decimal)
2. digest  = HMAC-SHA256(key=server seed bytes, msg=message)
3. Split digest into 8 big-endian uint32 chunks; take the first chunk
   <= REJECTION_LIMIT and return chunk % 37.
4. If no chunk qualifies, for round r = 0, 1, 2, ... recompute
   HMAC-SHA256(key, "<message>:<r>") and scan again. After
   MAX_EXTENSION_ROUNDS rounds give up with EntropyExhaustion.

REJECTION_LIMIT = floor(2**32 / 37) * 37 - 1 = 4294967288, the last uint32
that belongs to a complete group of 37 values, so every accepted value maps
onto 0..36 with equal probability.
"""
import hashlib
import hmac
import struct

from fairspin.config import settings
from fairspin.logic.errors import EntropyExhaustion


WHEEL_SIZE = 37
UINT32_RANGE = 2**32
REJECTION_LIMIT = (UINT32_RANGE // WHEEL_SIZE) * WHEEL_SIZE - 1
MAX_EXTENSION_ROUNDS = settings.max_extension_rounds

_CHUNK_FORMAT = ">8I"  # 32-byte digest as 8 big-endian uint32


def _digest(key: bytes, message: str) -> bytes:
    """HMAC-SHA256 of message under key."""
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def _first_unbiased(digest: bytes) -> int | None:
    """Return the first chunk inside the rejection limit, or None."""
    for chunk in struct.unpack(_CHUNK_FORMAT, digest):
        if chunk <= REJECTION_LIMIT:
            return chunk
    return None


def build_message(client_seed: str, nonce: int) -> str:
    """HMAC message for a client seed and nonce."""
    return f"{client_seed}:{nonce}"


def compute_outcome(secret_seed: bytes, client_seed: str, nonce: int) -> int:
    """
    Compute the winning number in [0, 36].

    Pure and deterministic. Raises TypeError/ValueError on malformed input and
    EntropyExhaustion if every extension round is rejected.
    """
    if not isinstance(secret_seed, bytes) or not secret_seed:
        raise ValueError("Server seed must be non-empty bytes")
    if not isinstance(client_seed, str):
        raise TypeError("Client seed must be a string")
    if isinstance(nonce, bool) or not isinstance(nonce, int):
        raise TypeError("Nonce must be an integer")
    if nonce < 0:
        raise ValueError(f"Nonce must be non-negative, got {nonce}")

    message = build_message(client_seed, nonce)
    chunk = _first_unbiased(_digest(secret_seed, message))

    for round_counter in range(MAX_EXTENSION_ROUNDS):
        if chunk is not None:
            break
        chunk = _first_unbiased(_digest(secret_seed, f"{message}:{round_counter}"))

    if chunk is None:
        raise EntropyExhaustion(
            f"No unbiased chunk after {MAX_EXTENSION_ROUNDS} extension rounds"
        )
    return chunk % WHEEL_SIZE
