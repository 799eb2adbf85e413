#!/usr/bin/env python3
"""Benchmark: compare Random vs Greedy strategies on a target deck.

Runs N sessions per strategy and reports:
- Completion rate, avg steps
- Avg net spend, avg rerolls, avg final level
- Per-level completion counts
- Speed (sessions/sec)
"""

from __future__ import annotations

import sys
import os
import time
import json
import logging
from dataclasses import dataclass, field
from collections import Counter

# Ensure project root is on path
_PROJECT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, _PROJECT)

from reroll_sim.enums import GameMode, OverlapMode
from reroll_sim.presets import PRESETS, get_preset, DeckPreset
from reroll_sim.runner import run_session, RandomStrategy, GreedyStrategy
from reroll_sim.session import SessionResult


@dataclass
class BenchmarkResult:
    name: str
    results: list[SessionResult]
    elapsed: float
    durations: list[float] = field(default_factory=list)

    @property
    def n(self) -> int:
        return len(self.results)

    @property
    def completed(self) -> int:
        return sum(1 for r in self.results if r.completed)

    @property
    def completion_rate(self) -> float:
        return self.completed / max(1, self.n)

    @property
    def avg_spent(self) -> float:
        return sum(r.net_spent for r in self.results) / max(1, self.n)

    @property
    def avg_rerolls(self) -> float:
        return sum(r.reroll_count for r in self.results) / max(1, self.n)

    @property
    def avg_steps(self) -> float:
        return sum(r.total_steps for r in self.results) / max(1, self.n)

    @property
    def avg_level(self) -> float:
        return sum(r.final_level for r in self.results) / max(1, self.n)

    @property
    def sessions_per_sec(self) -> float:
        return self.n / max(0.001, self.elapsed)

    def level_distribution(self) -> dict[int, int]:
        """Count how many sessions ended at each level."""
        dist = Counter()
        for r in self.results:
            dist[r.final_level] += 1
        return dict(sorted(dist.items()))


def run_benchmark(
    strategy,
    name: str,
    preset: DeckPreset,
    n_sessions: int = 100,
    mode: GameMode = GameMode.TIME_ATTACK,
    overlap_mode: OverlapMode = OverlapMode.NONE,
    max_steps: int = 2000,
    validate: bool = False,
) -> BenchmarkResult:
    """Run benchmark for a single strategy."""
    seeds = [f"bench_{i:04d}" for i in range(n_sessions)]
    t0 = time.time()
    results = []
    durations = []
    for seed in seeds:
        s0 = time.time()
        results.append(run_session(
            seed, strategy, preset=preset, mode=mode, overlap_mode=overlap_mode,
            max_steps=max_steps, validate=validate,
        ))
        durations.append(time.time() - s0)
    elapsed = time.time() - t0
    return BenchmarkResult(name=name, results=results, elapsed=elapsed, durations=durations)


def print_report(benchmarks: list[BenchmarkResult], preset: DeckPreset):
    """Print comparison table."""
    print("\n" + "=" * 80)
    print(f"REROLL SIMULATOR BENCHMARK: {preset.name}")
    print("=" * 80)

    # Header
    names = [b.name for b in benchmarks]
    col_w = max(18, max(len(n) for n in names) + 2)
    header = f"{'Metric':<22}" + "".join(f"{n:>{col_w}}" for n in names)
    print(header)
    print("-" * len(header))

    # Metrics
    rows = [
        ("Sessions", [str(b.n) for b in benchmarks]),
        ("Completed", [str(b.completed) for b in benchmarks]),
        ("Completion Rate", [f"{b.completion_rate:.1%}" for b in benchmarks]),
        ("Avg Net Spend", [f"{b.avg_spent:.0f}g" for b in benchmarks]),
        ("Avg Rerolls", [f"{b.avg_rerolls:.1f}" for b in benchmarks]),
        ("Avg Final Level", [f"{b.avg_level:.2f}" for b in benchmarks]),
        ("Avg Steps", [f"{b.avg_steps:.0f}" for b in benchmarks]),
        ("Speed (sessions/s)", [f"{b.sessions_per_sec:.1f}" for b in benchmarks]),
        ("Time (s)", [f"{b.elapsed:.1f}" for b in benchmarks]),
    ]
    for label, vals in rows:
        print(f"{label:<22}" + "".join(f"{v:>{col_w}}" for v in vals))

    # Level distribution
    print("\n--- Final Level Distribution ---")
    header2 = f"{'Level':<10}" + "".join(f"{n:>{col_w}}" for n in names)
    print(header2)
    for level in range(1, 11):
        vals = [str(b.level_distribution().get(level, 0)) for b in benchmarks]
        if any(v != "0" for v in vals):
            print(f"  {level:<8}" + "".join(f"{v:>{col_w}}" for v in vals))

    print("=" * 80)


def submit_completed(benchmarks: list[BenchmarkResult]) -> int:
    """Push completed sessions to the leaderboard. Returns how many were sent."""
    from reroll_sim import leaderboard

    leaderboard.ensure_schema()
    sent = 0
    for b in benchmarks:
        for result, duration in zip(b.results, b.durations):
            if result.completed:
                leaderboard.submit_result(result.to_payload(time_sec=round(duration, 3)))
                sent += 1
    return sent


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Reroll Simulator Benchmark")
    parser.add_argument("-n", "--sessions", type=int, default=100, help="Sessions per strategy")
    parser.add_argument("--max-steps", type=int, default=2000, help="Max steps per session")
    parser.add_argument("--preset", type=str, default=PRESETS[0].name, help="Target deck preset name")
    parser.add_argument("--list-presets", action="store_true", help="List deck presets and exit")
    parser.add_argument("--mode", choices=[m.value for m in GameMode], default=GameMode.TIME_ATTACK.value)
    parser.add_argument("--overlap", choices=[m.value for m in OverlapMode], default=OverlapMode.NONE.value)
    parser.add_argument("--validate", action="store_true", help="Check pool invariants after every step")
    parser.add_argument("--submit", action="store_true", help="Submit completed sessions to the leaderboard")
    parser.add_argument("--json", type=str, help="Output JSON results to file")
    parser.add_argument("--strategies", nargs="+", default=["random", "greedy"],
                        help="Strategies to benchmark: random, greedy")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.list_presets:
        for p in PRESETS:
            targets = ", ".join(f"{k}{'*' * r}" for k, r in p.targets().items())
            print(f"{p.name}: {targets}")
        return

    preset = get_preset(args.preset)
    mode = GameMode(args.mode)
    overlap = OverlapMode(args.overlap)
    benchmarks = []

    if "random" in args.strategies:
        print(f"Running Random strategy ({args.sessions} sessions)...")
        b = run_benchmark(RandomStrategy(seed=42), "Random", preset, args.sessions,
                          mode, overlap, args.max_steps, args.validate)
        benchmarks.append(b)
        print(f"  Done: {b.completion_rate:.1%} completed, {b.sessions_per_sec:.1f} sessions/s")

    if "greedy" in args.strategies:
        print(f"Running Greedy strategy ({args.sessions} sessions)...")
        b = run_benchmark(GreedyStrategy(), "Greedy", preset, args.sessions,
                          mode, overlap, args.max_steps, args.validate)
        benchmarks.append(b)
        print(f"  Done: {b.completion_rate:.1%} completed, {b.sessions_per_sec:.1f} sessions/s")

    if benchmarks:
        print_report(benchmarks, preset)

    if args.submit and benchmarks:
        sent = submit_completed(benchmarks)
        print(f"\nSubmitted {sent} completed sessions to the leaderboard")

    # JSON output
    if args.json and benchmarks:
        data = {}
        for b in benchmarks:
            data[b.name] = {
                "n": b.n,
                "completed": b.completed,
                "completion_rate": round(b.completion_rate, 4),
                "avg_spent": round(b.avg_spent, 1),
                "avg_rerolls": round(b.avg_rerolls, 1),
                "avg_level": round(b.avg_level, 2),
                "avg_steps": round(b.avg_steps, 0),
                "sessions_per_sec": round(b.sessions_per_sec, 1),
                "elapsed": round(b.elapsed, 2),
                "level_distribution": b.level_distribution(),
            }
        with open(args.json, "w") as f:
            json.dump(data, f, indent=2)
        print(f"\nJSON results saved to {args.json}")


if __name__ == "__main__":
    main()
