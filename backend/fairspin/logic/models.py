"""Result models for spins and seed rotations."""
from pydantic import BaseModel, ConfigDict, Field


class SpinResult(BaseModel):
    """
    Everything needed to audit one spin.

    server_seed is the revealed secret of the epoch that produced this result;
    by the time a caller sees it, that epoch has already been retired.
    """

    model_config = ConfigDict(frozen=True)

    winning_number: int = Field(..., ge=0, le=36)
    server_seed: str
    server_seed_hash: str
    client_seed: str
    nonce: int = Field(..., ge=0)


class RotationResult(BaseModel):
    """Out-of-band rotation: the old seed revealed, the new one committed."""

    model_config = ConfigDict(frozen=True)

    old_server_seed: str
    old_server_seed_hash: str
    new_server_seed_hash: str
