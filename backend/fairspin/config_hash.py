"""Fingerprint of the outcome algorithm parameters.

Shared by:
- GET /commitment (algorithm block)
- spin_processed telemetry
- scripts/audit_sim.py (CSV audit)

Two deployments with the same hash derive identical outcomes from identical
revealed inputs.
"""
import hashlib
import json

from fairspin.config import settings
from fairspin.logic.outcome import MAX_EXTENSION_ROUNDS, REJECTION_LIMIT, WHEEL_SIZE


ALGORITHM_NAME = "HMAC-SHA256"


def get_algorithm_snapshot() -> dict:
    """Parameters an independent verifier needs to reproduce an outcome."""
    return {
        "name": ALGORITHM_NAME,
        "wheel_size": WHEEL_SIZE,
        "rejection_limit": REJECTION_LIMIT,
        "max_extension_rounds": MAX_EXTENSION_ROUNDS,
        "server_seed_bytes": settings.server_seed_bytes,
    }


def get_config_hash() -> str:
    """
    Generate hash of the algorithm snapshot.

    Returns 16-char hex hash of the canonical JSON form.
    """
    canonical = json.dumps(get_algorithm_snapshot(), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
