"""Server-side telemetry.

Events only ever carry commitments and seeds that have already been revealed.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class TelemetrySink(Protocol):
    """Protocol for telemetry sinks."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Emit a telemetry event."""
        ...


class LoggingTelemetrySink:
    """Default sink that logs telemetry events."""

    def emit(self, event_name: str, data: dict[str, Any]) -> None:
        """Log telemetry event."""
        logger.info("TELEMETRY %s: %s", event_name, data)


@dataclass
class CommitmentServedEvent:
    """commitment_served: a player was shown the live commitment."""

    player_id: str
    server_seed_hash: str
    nonce: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SpinProcessedEvent:
    """spin_processed telemetry event."""

    player_id: str
    client_request_id: str
    round_id: str
    winning_number: int
    server_seed_hash: str  # Commitment of the revealed seed
    next_server_seed_hash: str
    nonce: int
    client_seed_overridden: bool
    lock_acquire_ms: float
    config_hash: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "player_id": self.player_id,
            "client_request_id": self.client_request_id,
            "round_id": self.round_id,
            "winning_number": self.winning_number,
            "server_seed_hash": self.server_seed_hash,
            "next_server_seed_hash": self.next_server_seed_hash,
            "nonce": self.nonce,
            "client_seed_overridden": self.client_seed_overridden,
            "lock_acquire_ms": self.lock_acquire_ms,
            "config_hash": self.config_hash,
        }


@dataclass
class SpinRejectedEvent:
    """spin_rejected telemetry event."""

    player_id: str
    client_request_id: str | None
    reason: str  # "ROUND_IN_PROGRESS" | "RNG_UNAVAILABLE" | "INTEGRITY_ERROR" | ...
    lock_acquire_ms: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for emission."""
        return {
            "player_id": self.player_id,
            "client_request_id": self.client_request_id,
            "reason": self.reason,
            "lock_acquire_ms": self.lock_acquire_ms,
        }


@dataclass
class SeedRotatedEvent:
    """seed_rotated: out-of-band rotation requested by a player."""

    player_id: str
    revealed_server_seed_hash: str
    server_seed_hash: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SessionResetEvent:
    """session_reset telemetry event."""

    player_id: str
    server_seed_hash: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class SessionClosedEvent:
    """session_closed: a player ended their session; the live seed is discarded unrevealed."""

    player_id: str
    closed: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class VerificationPerformedEvent:
    """verification_performed: someone audited a revealed spin."""

    server_seed_hash: str | None
    nonce: int
    valid: bool
    commitment_valid: bool | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class TelemetryService:
    """Service for emitting server telemetry events."""

    def __init__(self, sink: TelemetrySink | None = None):
        self._sink = sink or LoggingTelemetrySink()
        self._sink_errors = 0  # Counter for sink failures

    def set_sink(self, sink: TelemetrySink) -> None:
        """Set the telemetry sink (useful for testing)."""
        self._sink = sink

    @property
    def sink_errors(self) -> int:
        return self._sink_errors

    def _safe_emit(self, event_name: str, data: dict[str, Any]) -> None:
        """
        Emit event with exception safety.

        Sink failures MUST NOT break HTTP requests.
        """
        try:
            self._sink.emit(event_name, data)
        except Exception as e:
            self._sink_errors += 1
            logger.warning(
                "Telemetry sink error (count=%d): %s - %s",
                self._sink_errors,
                event_name,
                str(e),
            )

    def emit_commitment_served(self, event: CommitmentServedEvent) -> None:
        self._safe_emit("commitment_served", event.to_dict())

    def emit_spin_processed(self, event: SpinProcessedEvent) -> None:
        """Emit spin_processed event."""
        self._safe_emit("spin_processed", event.to_dict())

    def emit_spin_rejected(self, event: SpinRejectedEvent) -> None:
        """Emit spin_rejected event."""
        self._safe_emit("spin_rejected", event.to_dict())

    def emit_seed_rotated(self, event: SeedRotatedEvent) -> None:
        self._safe_emit("seed_rotated", event.to_dict())

    def emit_session_reset(self, event: SessionResetEvent) -> None:
        self._safe_emit("session_reset", event.to_dict())

    def emit_session_closed(self, event: SessionClosedEvent) -> None:
        self._safe_emit("session_closed", event.to_dict())

    def emit_verification_performed(self, event: VerificationPerformedEvent) -> None:
        self._safe_emit("verification_performed", event.to_dict())


# Global instance
telemetry_service = TelemetryService()
