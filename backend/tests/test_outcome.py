"""Outcome derivation tests: fixed vectors, bounds, uniformity, rejection sampling."""
import secrets
import struct

import pytest

from fairspin.logic import outcome
from fairspin.logic.errors import EntropyExhaustion
from fairspin.logic.outcome import (
    REJECTION_LIMIT,
    WHEEL_SIZE,
    build_message,
    compute_outcome,
)
from scripts.audit_sim import CHI_SQUARE_CRITICAL_P001, chi_square


ZERO_SEED = bytes(32)

# Interoperability vectors, computed independently with
# `printf 'test:0' | openssl dgst -sha256 -mac HMAC -macopt hexkey:00...00`
KNOWN_VECTORS = [
    # (server seed, client seed, nonce, expected number)
    (ZERO_SEED, "test", 0, 36),  # HMAC d1e37c0c..., chunk 3521346572
    (ZERO_SEED, "test", 1, 6),  # HMAC c26f6a31...
    (bytes([0x11] * 32), "hello", 0, 16),  # HMAC 4c545afa...
    (bytes([0xAB] * 32), "player-seed", 0, 9),
]


class TestConstants:
    """Rejection threshold for 37 outcomes."""

    def test_rejection_limit_value(self):
        assert REJECTION_LIMIT == 4294967288

    def test_rejection_limit_closes_complete_group(self):
        """Values 0..LIMIT form a whole number of groups of 37."""
        assert (REJECTION_LIMIT + 1) % WHEEL_SIZE == 0
        assert 2**32 - (REJECTION_LIMIT + 1) < WHEEL_SIZE

    def test_message_format(self):
        assert build_message("test", 0) == "test:0"
        assert build_message("a:b", 12) == "a:b:12"


class TestKnownVectors:
    """Canonical vectors shared with independent implementations."""

    @pytest.mark.parametrize("seed,client_seed,nonce,expected", KNOWN_VECTORS)
    def test_known_vector(self, seed, client_seed, nonce, expected):
        assert compute_outcome(seed, client_seed, nonce) == expected

    def test_zero_seed_fixture(self):
        """32 zero bytes, client seed "test", nonce 0 -> 36."""
        assert compute_outcome(ZERO_SEED, "test", 0) == 36


class TestProperties:
    """Bounds and determinism over random inputs."""

    def test_outcome_always_in_range(self):
        for i in range(5000):
            seed = secrets.token_bytes(32)
            client_seed = secrets.token_hex(8)
            result = compute_outcome(seed, client_seed, i % 50)
            assert 0 <= result <= 36

    def test_deterministic(self):
        for _ in range(200):
            seed = secrets.token_bytes(32)
            client_seed = secrets.token_hex(16)
            assert compute_outcome(seed, client_seed, 3) == compute_outcome(seed, client_seed, 3)

    def test_unicode_client_seed(self):
        result = compute_outcome(ZERO_SEED, "игрок-🎲", 0)
        assert 0 <= result <= 36

    def test_uniform_distribution_chi_square(self):
        """37,000 outcomes from independent random seeds fit a uniform distribution."""
        counts = [0] * WHEEL_SIZE
        for _ in range(37_000):
            counts[compute_outcome(secrets.token_bytes(32), "uniformity", 0)] += 1

        statistic = chi_square(counts)
        assert statistic <= CHI_SQUARE_CRITICAL_P001, (
            f"chi-square {statistic:.2f} exceeds {CHI_SQUARE_CRITICAL_P001} (df=36, p=0.001)"
        )
        assert min(counts) > 0


class TestInputValidation:
    """Malformed inputs raise instead of producing a number."""

    @pytest.mark.parametrize("seed", [b"", "00" * 32, None, bytearray(32)])
    def test_rejects_bad_seed(self, seed):
        with pytest.raises(ValueError):
            compute_outcome(seed, "test", 0)

    def test_rejects_non_string_client_seed(self):
        with pytest.raises(TypeError):
            compute_outcome(ZERO_SEED, b"test", 0)

    @pytest.mark.parametrize("nonce", [1.0, "0", True, None])
    def test_rejects_non_integer_nonce(self, nonce):
        with pytest.raises(TypeError):
            compute_outcome(ZERO_SEED, "test", nonce)

    def test_rejects_negative_nonce(self):
        with pytest.raises(ValueError):
            compute_outcome(ZERO_SEED, "test", -1)


def _digest_of(*chunks: int) -> bytes:
    padded = list(chunks) + [0xFFFFFFFF] * (8 - len(chunks))
    return struct.pack(">8I", *padded)


class TestRejectionSampling:
    """Chunk scanning and entropy extension, with the HMAC stubbed."""

    def test_skips_chunks_above_limit(self, monkeypatch):
        monkeypatch.setattr(
            outcome, "_digest", lambda key, message: _digest_of(0xFFFFFFFF, REJECTION_LIMIT + 1, 40)
        )
        assert compute_outcome(ZERO_SEED, "test", 0) == 3

    def test_first_value_of_partial_group_is_rejected(self, monkeypatch):
        """4294967289, the (2**32 - 1) - (2**32 - 1) % 37 threshold, is not accepted."""
        assert (2**32 - 1) - (2**32 - 1) % WHEEL_SIZE == REJECTION_LIMIT + 1
        monkeypatch.setattr(outcome, "_digest", lambda key, message: _digest_of(4294967289, 75))
        assert compute_outcome(ZERO_SEED, "test", 0) == 1  # 4294967289 would have given 0

    def test_limit_itself_is_accepted(self, monkeypatch):
        monkeypatch.setattr(outcome, "_digest", lambda key, message: _digest_of(REJECTION_LIMIT))
        assert compute_outcome(ZERO_SEED, "test", 0) == REJECTION_LIMIT % WHEEL_SIZE

    def test_extension_round_messages(self, monkeypatch):
        """All 8 chunks rejected: re-derive with "<message>:<round>"."""
        messages = []

        def fake_digest(key, message):
            messages.append(message)
            if message == "test:0:2":
                return _digest_of(0xFFFFFFFF, 37 * 5 + 4)
            return _digest_of()

        monkeypatch.setattr(outcome, "_digest", fake_digest)

        assert compute_outcome(ZERO_SEED, "test", 0) == 4
        assert messages == ["test:0", "test:0:0", "test:0:1", "test:0:2"]

    def test_exhaustion_is_fatal(self, monkeypatch):
        """Never fall back to a biased value when every round is rejected."""
        calls = []

        def fake_digest(key, message):
            calls.append(message)
            return _digest_of()

        monkeypatch.setattr(outcome, "_digest", fake_digest)

        with pytest.raises(EntropyExhaustion):
            compute_outcome(ZERO_SEED, "test", 0)
        assert len(calls) == 1 + outcome.MAX_EXTENSION_ROUNDS
        assert calls[-1] == f"test:0:{outcome.MAX_EXTENSION_ROUNDS - 1}"

    def test_round_cap_is_configurable(self, monkeypatch):
        monkeypatch.setattr(outcome, "MAX_EXTENSION_ROUNDS", 2)
        monkeypatch.setattr(outcome, "_digest", lambda key, message: _digest_of())
        with pytest.raises(EntropyExhaustion):
            compute_outcome(ZERO_SEED, "test", 0)
