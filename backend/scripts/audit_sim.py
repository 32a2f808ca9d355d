#!/usr/bin/env python3
"""
Audit simulation for the provably-fair RNG.

Runs headless spins through RNGCore, re-verifies every revealed result with
the public verifier and checks the distribution of winning numbers with a
chi-square goodness-of-fit test against uniform over 0..36.

Usage:
    python -m scripts.audit_sim --rounds 100000 --out out/audit.csv
    python -m scripts.audit_sim --rounds 100000 --seed AUDIT_2025 --out out/audit_seeded.csv
"""
import argparse
import csv
import subprocess
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fairspin.config_hash import get_config_hash
from fairspin.logic.core import RNGCore
from fairspin.logic.entropy import SeededEntropy
from fairspin.logic.outcome import WHEEL_SIZE
from fairspin.logic.verifier import verify_result


# Upper critical value of chi-square with 36 degrees of freedom at p = 0.001
CHI_SQUARE_CRITICAL_P001 = 67.985


@dataclass
class SimulationStats:
    """Statistics accumulated during simulation."""
    rounds: int = 0
    verified: int = 0
    verification_failures: int = 0
    repeated_seeds: int = 0
    counts: list[int] = field(default_factory=lambda: [0] * WHEEL_SIZE)


def chi_square(counts: list[int]) -> float:
    """Chi-square statistic of counts against a uniform expectation."""
    total = sum(counts)
    if total == 0:
        return 0.0
    expected = total / len(counts)
    return sum((observed - expected) ** 2 / expected for observed in counts)


def get_git_commit() -> str:
    """Get current git commit hash (short)."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            cwd=Path(__file__).parent.parent.parent,
            timeout=5,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (subprocess.TimeoutExpired, FileNotFoundError):
        pass
    return "unknown"


def get_timestamp_iso() -> str:
    """Get ISO 8601 UTC timestamp."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def run_simulation(
    rounds: int,
    seed_str: str | None = None,
    verbose: bool = False,
) -> SimulationStats:
    """
    Run spins and collect statistics.

    With seed_str the run is reproducible (SeededEntropy); without it seeds
    come from the system CSPRNG, exactly as in production.
    """
    core = RNGCore(SeededEntropy(seed_str) if seed_str is not None else None)
    stats = SimulationStats()
    seen_seeds: set[str] = set()

    progress_interval = max(rounds // 100, 1)
    for i in range(rounds):
        result = core.spin()
        stats.rounds += 1
        stats.counts[result.winning_number] += 1

        if result.server_seed in seen_seeds:
            stats.repeated_seeds += 1
        seen_seeds.add(result.server_seed)

        if verify_result(result):
            stats.verified += 1
        else:
            stats.verification_failures += 1

        if verbose and i % progress_interval == 0:
            print(f"\rProgress: {i / rounds * 100:.1f}%", end="", flush=True)

    if verbose:
        print("\rProgress: 100.0%")

    return stats


def generate_csv(
    rounds: int,
    seed_str: str | None,
    stats: SimulationStats,
    output_path: str,
) -> None:
    """Write the one-row audit CSV."""
    statistic = chi_square(stats.counts)

    row = {
        "timestamp": get_timestamp_iso(),
        "git_commit": get_git_commit(),
        "config_hash": get_config_hash(),
        "rounds": rounds,
        "seed": seed_str or "system",
        "chi_square": f"{statistic:.4f}",
        "chi_square_critical": f"{CHI_SQUARE_CRITICAL_P001:.3f}",
        "uniformity_passed": statistic <= CHI_SQUARE_CRITICAL_P001,
        "verified": stats.verified,
        "verification_failures": stats.verification_failures,
        "repeated_seeds": stats.repeated_seeds,
        "min_count": min(stats.counts),
        "max_count": max(stats.counts),
    }

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=row.keys())
        writer.writeheader()
        writer.writerow(row)

    print(f"CSV written to: {output_path}")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Provably-fair RNG audit simulation")
    parser.add_argument(
        "--rounds",
        type=int,
        required=True,
        help="Number of spins to simulate",
    )
    parser.add_argument(
        "--seed",
        type=str,
        default=None,
        help="Seed string for a reproducible run (default: system entropy)",
    )
    parser.add_argument(
        "--out",
        type=str,
        required=True,
        help="Output CSV path",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show progress",
    )

    args = parser.parse_args()
    if args.rounds <= 0:
        parser.error("--rounds must be positive")

    print(f"Running simulation: rounds={args.rounds}, seed={args.seed or 'system'}")
    print(f"Config hash: {get_config_hash()}")

    stats = run_simulation(rounds=args.rounds, seed_str=args.seed, verbose=args.verbose)
    generate_csv(rounds=args.rounds, seed_str=args.seed, stats=stats, output_path=args.out)

    statistic = chi_square(stats.counts)
    print("\nSummary:")
    print(f"  Rounds: {stats.rounds}")
    print(f"  Verified: {stats.verified}")
    print(f"  Verification failures: {stats.verification_failures}")
    print(f"  Repeated server seeds: {stats.repeated_seeds}")
    print(f"  Chi-square: {statistic:.4f} (critical {CHI_SQUARE_CRITICAL_P001} at p=0.001, df=36)")

    if stats.verification_failures or stats.repeated_seeds:
        print("ASSERTION FAILED: every spin must verify and reveal a fresh seed")
        return 1
    if statistic > CHI_SQUARE_CRITICAL_P001:
        print("ASSERTION FAILED: distribution is not uniform")
        return 1

    print("\nASSERTION PASSED")
    return 0


if __name__ == "__main__":
    sys.exit(main())
