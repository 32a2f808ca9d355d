"""Redis service for spin idempotency and per-player locking."""
import hashlib
import json
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import redis.asyncio as redis

from fairspin.config import settings
from fairspin.errors import ErrorCode, GameError


@dataclass
class LockMetrics:
    """Metrics from lock acquisition for telemetry."""

    acquire_ms: float


class RedisService:
    """
    Redis client for the spin idempotency cache and player locking.

    A retried POST /spin must return the already revealed result rather than
    consume another epoch, so responses are cached per clientRequestId.
    """

    # Key prefixes
    IDEMPOTENCY_PREFIX = "idem:spin:"
    LOCK_PREFIX = "lock:player:"

    # TTLs in seconds
    IDEMPOTENCY_TTL = settings.idempotency_ttl_seconds
    LOCK_TTL = settings.lock_ttl_seconds

    # Lua script for token-safe lock release (compare-and-delete)
    RELEASE_LOCK_SCRIPT = """
    if redis.call("get", KEYS[1]) == ARGV[1] then
        return redis.call("del", KEYS[1])
    else
        return 0
    end
    """

    def __init__(self, redis_url: str | None = None):
        self._url = redis_url or settings.redis_url
        self._client: redis.Redis | None = None

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._client is None:
            self._client = redis.from_url(self._url, decode_responses=True)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client, raise if not connected."""
        if self._client is None:
            raise RuntimeError("Redis not connected")
        return self._client

    def _payload_hash(self, payload: dict[str, Any]) -> str:
        """Create deterministic hash of payload for conflict detection."""
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode()).hexdigest()[:16]

    def _idempotency_key(self, player_id: str, request_id: str) -> str:
        return f"{self.IDEMPOTENCY_PREFIX}{player_id}:{request_id}"

    async def check_idempotency(
        self, player_id: str, request_id: str, payload: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Check idempotency cache.

        Returns cached response if request_id was seen before with same payload.
        Raises IDEMPOTENCY_CONFLICT if same request_id with different payload.
        Returns None if request_id not seen before.
        """
        cached = await self.client.get(self._idempotency_key(player_id, request_id))

        if cached is None:
            return None

        data = json.loads(cached)
        if data.get("payload_hash") != self._payload_hash(payload):
            raise GameError(
                ErrorCode.IDEMPOTENCY_CONFLICT,
                "Same clientRequestId used with different payload.",
            )

        return data.get("response")

    async def store_idempotency(
        self,
        player_id: str,
        request_id: str,
        payload: dict[str, Any],
        response: dict[str, Any],
    ) -> None:
        """Store response in idempotency cache."""
        data = {
            "payload_hash": self._payload_hash(payload),
            "response": response,
        }
        await self.client.setex(
            self._idempotency_key(player_id, request_id),
            self.IDEMPOTENCY_TTL,
            json.dumps(data),
        )

    async def acquire_player_lock(self, player_id: str) -> str | None:
        """
        Attempt to acquire per-player lock with unique token.

        Returns token string if lock acquired, None if already locked.
        """
        key = f"{self.LOCK_PREFIX}{player_id}"
        token = str(uuid.uuid4())
        acquired = await self.client.set(key, token, nx=True, ex=self.LOCK_TTL)
        return token if acquired is True else None

    async def release_player_lock(self, player_id: str, token: str) -> bool:
        """
        Release per-player lock only if token matches (token-safe).

        Returns True if lock was released, False if token didn't match.
        """
        key = f"{self.LOCK_PREFIX}{player_id}"
        result = await self.client.eval(self.RELEASE_LOCK_SCRIPT, 1, key, token)
        return result == 1

    @asynccontextmanager
    async def player_lock(self, player_id: str):
        """
        Context manager for player lock.

        Raises ROUND_IN_PROGRESS if lock cannot be acquired.
        Yields LockMetrics for telemetry.
        """
        t0 = time.monotonic()
        token = await self.acquire_player_lock(player_id)
        if token is None:
            raise GameError(
                ErrorCode.ROUND_IN_PROGRESS,
                "Another spin is in progress for this player.",
            )
        metrics = LockMetrics(acquire_ms=(time.monotonic() - t0) * 1000)
        try:
            yield metrics
        finally:
            await self.release_player_lock(player_id, token)


# Global instance
redis_service = RedisService()
