"""Provably-fair RNG orchestrator."""
import logging

from fairspin.logic.entropy import EntropySource
from fairspin.logic.epoch import SeedRotator
from fairspin.logic.models import RotationResult, SpinResult
from fairspin.logic import verifier
from fairspin.logic.seeds import SeedCommitter


logger = logging.getLogger(__name__)


class RNGCore:
    """
    Commit-reveal roulette RNG.

    Flow:
    1. Caller reads get_commitment_hash() and shows it before the spin
    2. spin() computes HMAC-SHA256(server seed, "client_seed:nonce") -> 0..36
    3. The result reveals the server seed; a new seed is committed at once
    4. Anyone can check the result with RNGCore.verify()

    Construct one instance per session and pass it to whatever runs the game.
    """

    def __init__(self, entropy: EntropySource | None = None):
        self._rotator = SeedRotator(SeedCommitter(entropy))
        logger.info("RNG initialised, commitment=%s", self._rotator.current_commitment())

    def get_commitment_hash(self) -> str:
        """Commitment of the live, unrevealed server seed."""
        return self._rotator.current_commitment()

    def get_nonce(self) -> int:
        return self._rotator.current_nonce()

    def get_client_seed(self) -> str:
        return self._rotator.client_seed

    def spin(self, client_seed: str | None = None) -> SpinResult:
        """Generate the next winning number and rotate the server seed."""
        result = self._rotator.spin_and_rotate(client_seed)
        logger.debug(
            "Spin: number=%d seed_hash=%s nonce=%d",
            result.winning_number,
            result.server_seed_hash,
            result.nonce,
        )
        return result

    def rotate_server_seed(self) -> RotationResult:
        """Reveal the current server seed without spinning and commit to a new one."""
        rotation = self._rotator.rotate()
        logger.info(
            "Server seed rotated: %s -> %s",
            rotation.old_server_seed_hash,
            rotation.new_server_seed_hash,
        )
        return rotation

    def reset(self) -> None:
        """Reinitialise all seed state (session reset)."""
        self._rotator.reset()
        logger.info("RNG reset, commitment=%s", self._rotator.current_commitment())

    @staticmethod
    def verify(server_seed: str, client_seed: str, nonce: int, expected_result: int) -> bool:
        """Client-side verification; same algorithm as spin()."""
        return verifier.verify(server_seed, client_seed, nonce, expected_result)
