"""HTTP protocol models (camelCase on the wire)."""
from pydantic import BaseModel, Field

from fairspin.config import settings
from fairspin.config_hash import ALGORITHM_NAME, get_config_hash
from fairspin.logic.outcome import MAX_EXTENSION_ROUNDS, REJECTION_LIMIT, WHEEL_SIZE


# === Request Models ===


class SpinRequest(BaseModel):
    """POST /spin request body."""

    clientRequestId: str = Field(..., min_length=1, description="Idempotency key")
    clientSeed: str | None = Field(
        default=None,
        description="Optional player seed; invalid values keep the stored seed",
    )


class VerifyRequest(BaseModel):
    """POST /verify request body."""

    serverSeed: str
    clientSeed: str
    nonce: int
    winningNumber: int
    serverSeedHash: str | None = None


# === Response Models ===


class Algorithm(BaseModel):
    """Published outcome algorithm parameters."""

    name: str = ALGORITHM_NAME
    wheelSize: int = WHEEL_SIZE
    rejectionLimit: int = REJECTION_LIMIT
    maxExtensionRounds: int = MAX_EXTENSION_ROUNDS
    configHash: str = Field(default_factory=get_config_hash)


class CommitmentResponse(BaseModel):
    """GET /commitment response."""

    protocolVersion: str = settings.protocol_version
    serverSeedHash: str
    nonce: int
    algorithm: Algorithm = Field(default_factory=Algorithm)


class NonceResponse(BaseModel):
    """GET /nonce response."""

    protocolVersion: str = settings.protocol_version
    nonce: int


class SpinOutcome(BaseModel):
    """Revealed spin, everything needed for verification."""

    winningNumber: int
    color: str
    wheelIndex: int
    serverSeed: str
    serverSeedHash: str
    clientSeed: str
    nonce: int


class SpinResponse(BaseModel):
    """POST /spin response."""

    protocolVersion: str = settings.protocol_version
    roundId: str
    result: SpinOutcome
    nextServerSeedHash: str


class RotateResponse(BaseModel):
    """POST /rotate response."""

    protocolVersion: str = settings.protocol_version
    revealedServerSeed: str
    revealedServerSeedHash: str
    serverSeedHash: str


class ResetResponse(BaseModel):
    """POST /reset response."""

    protocolVersion: str = settings.protocol_version
    serverSeedHash: str
    nonce: int


class CloseSessionResponse(BaseModel):
    """DELETE /session response."""

    protocolVersion: str = settings.protocol_version
    closed: bool


class VerifyResponse(BaseModel):
    """POST /verify response."""

    protocolVersion: str = settings.protocol_version
    valid: bool
    commitmentValid: bool | None = None
