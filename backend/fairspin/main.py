"""FairSpin FastAPI application."""
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from fairspin.config import settings
from fairspin.config_hash import get_config_hash
from fairspin.errors import ErrorCode, GameError
from fairspin.logic.errors import FairnessError
from fairspin.logic.verifier import verify, verify_commitment
from fairspin.logic.wheel import number_color, wheel_index
from fairspin.middleware import ErrorHandlerMiddleware, PlayerIdMiddleware
from fairspin.protocol import (
    CloseSessionResponse,
    CommitmentResponse,
    NonceResponse,
    ResetResponse,
    RotateResponse,
    SpinOutcome,
    SpinRequest,
    SpinResponse,
    VerifyRequest,
    VerifyResponse,
)
from fairspin.redis_service import redis_service
from fairspin.sessions import SessionRegistry
from fairspin.telemetry import (
    telemetry_service,
    CommitmentServedEvent,
    SeedRotatedEvent,
    SessionClosedEvent,
    SessionResetEvent,
    SpinProcessedEvent,
    SpinRejectedEvent,
    VerificationPerformedEvent,
)
from fairspin.validators import validate_spin_request


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage Redis connection and RNG session lifecycle."""
    logging.getLogger("fairspin").setLevel(settings.log_level)
    await redis_service.connect()
    app.state.sessions = SessionRegistry()
    yield
    app.state.sessions.close()
    await redis_service.close()


app = FastAPI(
    title="FairSpin RNG",
    version="0.1.0",
    description="Provably-fair commit-reveal roulette outcome service",
    lifespan=lifespan,
)

app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(PlayerIdMiddleware)


def _sessions(request: Request) -> SessionRegistry:
    return request.app.state.sessions


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/commitment")
async def commitment(request: Request) -> dict:
    """
    GET /commitment.

    The hash must be shown to the player before the spin it commits to.
    """
    player_id = request.state.player_id
    core = _sessions(request).get(player_id)

    response = CommitmentResponse(
        serverSeedHash=core.get_commitment_hash(),
        nonce=core.get_nonce(),
    )

    telemetry_service.emit_commitment_served(
        CommitmentServedEvent(
            player_id=player_id,
            server_seed_hash=response.serverSeedHash,
            nonce=response.nonce,
        )
    )
    return response.model_dump()


@app.get("/nonce")
async def nonce(request: Request) -> dict:
    """GET /nonce: current epoch nonce."""
    core = _sessions(request).get(request.state.player_id)
    return NonceResponse(nonce=core.get_nonce()).model_dump()


@app.post("/spin")
async def spin(request: Request, body: SpinRequest) -> dict:
    """
    POST /spin.

    Implements:
    - Request validation
    - Idempotency (same clientRequestId returns the cached, already revealed result)
    - Per-player locking (ROUND_IN_PROGRESS on concurrent spin)
    - One outcome computation and one seed rotation
    """
    player_id = request.state.player_id

    validate_spin_request(body)

    payload = {"clientSeed": body.clientSeed}

    # Fast path; no telemetry on replay
    cached = await redis_service.check_idempotency(player_id, body.clientRequestId, payload)
    if cached is not None:
        return cached

    lock_start = time.monotonic()
    try:
        async with redis_service.player_lock(player_id) as lock_metrics:
            # Re-check inside lock (correctness)
            cached = await redis_service.check_idempotency(
                player_id, body.clientRequestId, payload
            )
            if cached is not None:
                return cached

            core = _sessions(request).get(player_id)
            result = core.spin(body.clientSeed)
            next_hash = core.get_commitment_hash()

            round_id = str(uuid.uuid4())
            response = SpinResponse(
                roundId=round_id,
                result=SpinOutcome(
                    winningNumber=result.winning_number,
                    color=number_color(result.winning_number),
                    wheelIndex=wheel_index(result.winning_number),
                    serverSeed=result.server_seed,
                    serverSeedHash=result.server_seed_hash,
                    clientSeed=result.client_seed,
                    nonce=result.nonce,
                ),
                nextServerSeedHash=next_hash,
            )
            response_dict = response.model_dump()

            await redis_service.store_idempotency(
                player_id, body.clientRequestId, payload, response_dict
            )

            telemetry_service.emit_spin_processed(
                SpinProcessedEvent(
                    player_id=player_id,
                    client_request_id=body.clientRequestId,
                    round_id=round_id,
                    winning_number=result.winning_number,
                    server_seed_hash=result.server_seed_hash,
                    next_server_seed_hash=next_hash,
                    nonce=result.nonce,
                    client_seed_overridden=body.clientSeed == result.client_seed,
                    lock_acquire_ms=lock_metrics.acquire_ms,
                    config_hash=get_config_hash(),
                )
            )

            return response_dict

    except GameError as e:
        if e.code == ErrorCode.ROUND_IN_PROGRESS:
            telemetry_service.emit_spin_rejected(
                SpinRejectedEvent(
                    player_id=player_id,
                    client_request_id=body.clientRequestId,
                    reason=e.code.value,
                    lock_acquire_ms=(time.monotonic() - lock_start) * 1000,
                )
            )
        raise
    except FairnessError as e:
        telemetry_service.emit_spin_rejected(
            SpinRejectedEvent(
                player_id=player_id,
                client_request_id=body.clientRequestId,
                reason=GameError.from_fairness_error(e).code.value,
                lock_acquire_ms=(time.monotonic() - lock_start) * 1000,
            )
        )
        raise


@app.post("/rotate")
async def rotate(request: Request) -> dict:
    """POST /rotate: reveal the live seed without spinning."""
    player_id = request.state.player_id
    async with redis_service.player_lock(player_id):
        rotation = _sessions(request).get(player_id).rotate_server_seed()

    telemetry_service.emit_seed_rotated(
        SeedRotatedEvent(
            player_id=player_id,
            revealed_server_seed_hash=rotation.old_server_seed_hash,
            server_seed_hash=rotation.new_server_seed_hash,
        )
    )
    return RotateResponse(
        revealedServerSeed=rotation.old_server_seed,
        revealedServerSeedHash=rotation.old_server_seed_hash,
        serverSeedHash=rotation.new_server_seed_hash,
    ).model_dump()


@app.post("/reset")
async def reset(request: Request) -> dict:
    """POST /reset: fresh seeds for a new session."""
    player_id = request.state.player_id
    async with redis_service.player_lock(player_id):
        core = _sessions(request).reset(player_id)
        response = ResetResponse(
            serverSeedHash=core.get_commitment_hash(),
            nonce=core.get_nonce(),
        )

    telemetry_service.emit_session_reset(
        SessionResetEvent(player_id=player_id, server_seed_hash=response.serverSeedHash)
    )
    return response.model_dump()


@app.delete("/session")
async def close_session(request: Request) -> dict:
    """DELETE /session: discard the player's RNG without revealing the live seed."""
    player_id = request.state.player_id
    async with redis_service.player_lock(player_id):
        closed = _sessions(request).drop(player_id)

    telemetry_service.emit_session_closed(SessionClosedEvent(player_id=player_id, closed=closed))
    return CloseSessionResponse(closed=closed).model_dump()


@app.post("/verify")
async def verify_spin(body: VerifyRequest) -> dict:
    """
    POST /verify: public audit of a revealed spin.

    Needs no session; malformed values come back as valid=false.
    """
    valid = verify(body.serverSeed, body.clientSeed, body.nonce, body.winningNumber)
    commitment_valid = None
    if body.serverSeedHash is not None:
        commitment_valid = verify_commitment(body.serverSeed, body.serverSeedHash)

    telemetry_service.emit_verification_performed(
        VerificationPerformedEvent(
            server_seed_hash=body.serverSeedHash,
            nonce=body.nonce,
            valid=valid,
            commitment_valid=commitment_valid,
        )
    )
    return VerifyResponse(valid=valid, commitmentValid=commitment_valid).model_dump()
