"""
Public audit functions.

Stateless recomputation of a spin from its revealed values. Every function
here is a boolean predicate over untrusted input: malformed values yield
False, never an exception.
"""
import hashlib
import hmac
import re

from fairspin.logic.errors import EntropyExhaustion
from fairspin.logic.models import SpinResult
from fairspin.logic.outcome import WHEEL_SIZE, compute_outcome

_HEX = re.compile(r"[0-9a-fA-F]+")


def _seed_bytes(server_seed: str | bytes) -> bytes | None:
    """Decode a revealed seed (hex text or raw bytes), None if malformed."""
    if isinstance(server_seed, bytes):
        return server_seed or None
    if not isinstance(server_seed, str) or not _HEX.fullmatch(server_seed):
        return None
    try:
        return bytes.fromhex(server_seed) or None
    except ValueError:
        return None


def verify(
    server_seed: str | bytes,
    client_seed: str,
    nonce: int,
    claimed_outcome: int,
) -> bool:
    """Recompute the outcome and compare it to the claimed winning number."""
    seed = _seed_bytes(server_seed)
    if seed is None or not isinstance(client_seed, str):
        return False
    for value in (nonce, claimed_outcome):
        if isinstance(value, bool) or not isinstance(value, int):
            return False
    if nonce < 0 or not 0 <= claimed_outcome < WHEEL_SIZE:
        return False
    try:
        return compute_outcome(seed, client_seed, nonce) == claimed_outcome
    except EntropyExhaustion:
        return False


def verify_commitment(server_seed: str | bytes, server_seed_hash: str) -> bool:
    """Check that a revealed seed hashes to the commitment published before the spin."""
    seed = _seed_bytes(server_seed)
    if seed is None or not isinstance(server_seed_hash, str) or not _HEX.fullmatch(server_seed_hash):
        return False
    expected = hashlib.sha256(seed).hexdigest()
    return hmac.compare_digest(expected, server_seed_hash.lower())


def verify_result(result: SpinResult) -> bool:
    """Full audit of a SpinResult: commitment and outcome."""
    return verify_commitment(result.server_seed, result.server_seed_hash) and verify(
        result.server_seed, result.client_seed, result.nonce, result.winning_number
    )
