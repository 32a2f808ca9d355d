"""Seed epoch lifecycle: commit, reveal, rotate."""
import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum

from fairspin.config import settings
from fairspin.logic.errors import EntropySourceError, EpochStateError
from fairspin.logic.models import RotationResult, SpinResult
from fairspin.logic.outcome import compute_outcome
from fairspin.logic.seeds import SeedCommitter


logger = logging.getLogger(__name__)


class EpochPhase(str, Enum):
    """Epoch state. There is no transition out of REVEALED except replacement."""

    COMMITTED = "COMMITTED"
    REVEALED = "REVEALED"


@dataclass(frozen=True)
class Epoch:
    """One server seed from commitment to reveal."""

    secret: bytes
    commitment: str
    nonce: int = 0
    phase: EpochPhase = EpochPhase.COMMITTED

    def __post_init__(self):
        SeedCommitter.check_commitment(self.secret, self.commitment)

    def reveal(self) -> "Epoch":
        if self.phase is not EpochPhase.COMMITTED:
            raise EpochStateError("Epoch seed has already been revealed")
        return replace(self, phase=EpochPhase.REVEALED)


def is_acceptable_client_seed(client_seed: object) -> bool:
    """Client seed policy: non-blank printable string within the length limit."""
    return (
        isinstance(client_seed, str)
        and bool(client_seed.strip())
        and len(client_seed) <= settings.max_client_seed_length
        and client_seed.isprintable()
    )


class SeedRotator:
    """
    Owns the live epoch and the current client seed.

    All state changes and reads happen under one lock, so a reader sees
    either the pre-rotation or the post-rotation epoch, never a mix.
    """

    def __init__(self, committer: SeedCommitter):
        self._committer = committer
        self._lock = threading.Lock()
        self._epoch: Epoch | None = None
        self._client_seed = ""
        with self._lock:
            self._reset_locked()

    def _new_epoch(self) -> Epoch:
        secret, commitment = self._committer.new_secret()
        return Epoch(secret=secret, commitment=commitment)

    def _live_epoch(self) -> Epoch:
        if self._epoch is None:
            raise EntropySourceError("No live epoch: seed generation failed, reset required")
        return self._epoch

    def _reset_locked(self) -> None:
        self._epoch = None
        self._client_seed = self._committer.generate_client_seed()
        self._epoch = self._new_epoch()

    def _retire_locked(self) -> Epoch:
        """Reveal the live epoch and replace it. The revealed epoch is returned."""
        revealed = self._live_epoch().reveal()
        # A revealed epoch is never live, even if generating the next one fails.
        self._epoch = None
        self._epoch = self._new_epoch()
        return revealed

    def current_commitment(self) -> str:
        with self._lock:
            return self._live_epoch().commitment

    def current_nonce(self) -> int:
        with self._lock:
            return self._live_epoch().nonce

    @property
    def client_seed(self) -> str:
        with self._lock:
            return self._client_seed

    def spin_and_rotate(self, client_seed_override: str | None = None) -> SpinResult:
        """Compute the outcome on the live epoch, reveal it and rotate."""
        with self._lock:
            epoch = self._live_epoch()
            if client_seed_override is not None:
                if is_acceptable_client_seed(client_seed_override):
                    self._client_seed = client_seed_override
                else:
                    logger.warning("Ignoring invalid client seed, keeping stored seed")

            SeedCommitter.check_commitment(epoch.secret, epoch.commitment)
            winning_number = compute_outcome(epoch.secret, self._client_seed, epoch.nonce)

            revealed = self._retire_locked()
            return SpinResult(
                winning_number=winning_number,
                server_seed=revealed.secret.hex(),
                server_seed_hash=revealed.commitment,
                client_seed=self._client_seed,
                nonce=revealed.nonce,
            )

    def rotate(self) -> RotationResult:
        """Reveal the live seed without spinning and commit to a new one."""
        with self._lock:
            revealed = self._retire_locked()
            return RotationResult(
                old_server_seed=revealed.secret.hex(),
                old_server_seed_hash=revealed.commitment,
                new_server_seed_hash=self._epoch.commitment,
            )

    def reset(self) -> None:
        """Discard the live epoch and client seed, as at construction."""
        with self._lock:
            self._reset_locked()
