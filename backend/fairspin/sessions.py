"""Per-player RNG sessions held in process memory."""
import logging
import threading
from collections import OrderedDict

from fairspin.config import settings
from fairspin.logic.core import RNGCore
from fairspin.logic.entropy import EntropySource


logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    One RNGCore per player, bounded by least-recent use.

    Created once in the application lifespan and closed on shutdown; nothing
    is persisted, so a restart starts every player on a fresh epoch. Past
    max_sessions the least recently used player is evicted; their next request
    opens a new epoch and the unrevealed seed is never disclosed.
    """

    def __init__(self, entropy: EntropySource | None = None, max_sessions: int | None = None):
        self._entropy = entropy
        self.max_sessions = max_sessions or settings.max_sessions
        self._lock = threading.Lock()
        self._sessions: OrderedDict[str, RNGCore] = OrderedDict()

    def get(self, player_id: str) -> RNGCore:
        """Return the player's RNG, creating it on first use."""
        with self._lock:
            core = self._sessions.get(player_id)
            if core is not None:
                self._sessions.move_to_end(player_id)
                return core
            core = RNGCore(self._entropy)
            self._sessions[player_id] = core
            logger.info("Session opened for player %s", player_id)
            while len(self._sessions) > self.max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Session evicted for player %s", evicted)
            return core

    def reset(self, player_id: str) -> RNGCore:
        """Reinitialise the player's seeds."""
        core = self.get(player_id)
        core.reset()
        return core

    def drop(self, player_id: str) -> bool:
        """End the player's session; returns False if there was none."""
        with self._lock:
            dropped = self._sessions.pop(player_id, None) is not None
        if dropped:
            logger.info("Session closed for player %s", player_id)
        return dropped

    def __contains__(self, player_id: str) -> bool:
        with self._lock:
            return player_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def close(self) -> None:
        """Discard every session (unrevealed seeds are never disclosed)."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        logger.info("Closed %d RNG sessions", count)
