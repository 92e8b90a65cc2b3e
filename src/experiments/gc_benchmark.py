from __future__ import annotations

import argparse
import csv
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from marksweep import RuntimeConfig, StressPolicy, Runtime
from experiments.instrumentation import HeapProfiler


# label, fixed growth factor (None: take --growth-factor), collect on every allocation
PolicyConfig = Tuple[str, Optional[int], bool]


POLICY_VARIANTS: Dict[str, PolicyConfig] = {
    "adaptive": ("Adaptive threshold, configured growth factor", None, False),
    "adaptive_x1": ("Adaptive threshold, 1x survivors", 1, False),
    "adaptive_x4": ("Adaptive threshold, 4x survivors", 4, False),
    "stress": ("Collect on every allocation", None, True),
}


def run_churn_trial(
    config: RuntimeConfig,
    *,
    stress: bool,
    rounds: int,
    burst: int,
    retained: int,
) -> Dict[str, float]:
    """
    Allocate `burst` leaves per round and drop them again, keeping the last
    `retained` of each burst paired up on the stack as a long-lived list.
    """
    profiler = HeapProfiler(run_id="churn")
    runtime = Runtime(config, policy=StressPolicy() if stress else None, profiler=profiler)
    start = time.perf_counter()
    for round_idx in range(rounds):
        for offset in range(burst):
            runtime.push_integer(round_idx * burst + offset)
        for _ in range(burst - retained):
            runtime.pop()
        if retained and round_idx > 0:
            # Fold this round's survivors into the accumulated chain below them.
            for _ in range(retained):
                runtime.make_pair()
    elapsed = time.perf_counter() - start
    # live_count still includes unswept garbage; collect so only reachable objects remain.
    runtime.collect(trigger="final")
    reachable_at_end = runtime.live_count
    runtime.shutdown()

    cycles = profiler.events_of("gc_cycle")
    pauses = [float(event["pause_duration"]) for event in cycles]
    return {
        "rounds": float(rounds),
        "burst": float(burst),
        "retained": float(retained),
        "initial_threshold": float(config.initial_threshold),
        "growth_factor": float(config.growth_factor),
        "allocations": float(len(profiler.events_of("allocation"))),
        "gc_cycles": float(len(cycles)),
        "reclaimed": float(profiler.summary()["reclaimed"]),
        "peak_live": float(profiler.peak_live),
        "reachable_at_end": float(reachable_at_end),
        "total_pause_s": sum(pauses),
        "max_pause_s": max(pauses) if pauses else 0.0,
        "elapsed_s": elapsed,
    }


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Allocation churn benchmark across collection policies.")
    parser.add_argument("--rounds", type=int, default=1000)
    parser.add_argument("--burst", type=int, default=20)
    parser.add_argument("--retained", type=int, default=0, help="Leaves kept alive per round.")
    parser.add_argument("--initial-threshold", type=int, default=8, help="Live objects before the first collection.")
    parser.add_argument("--growth-factor", type=int, default=2, help="Threshold multiplier for the adaptive variant.")
    parser.add_argument("--variants", nargs="*", default=list(POLICY_VARIANTS))
    parser.add_argument("--output", type=str, default="results/gc_benchmark.csv")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    if args.retained > args.burst:
        raise ValueError("--retained cannot exceed --burst")

    rows: List[Dict[str, float]] = []
    for variant in args.variants:
        if variant not in POLICY_VARIANTS:
            raise ValueError(f"Unknown variant {variant!r}; choose from {sorted(POLICY_VARIANTS)}")
        label, growth_factor, stress = POLICY_VARIANTS[variant]
        config = RuntimeConfig(
            initial_threshold=args.initial_threshold,
            growth_factor=growth_factor or args.growth_factor,
        ).validate()
        summary = run_churn_trial(
            config,
            stress=stress,
            rounds=args.rounds,
            burst=args.burst,
            retained=args.retained,
        )
        summary["variant"] = variant
        rows.append(summary)
        print(
            f"[{variant}] {label}: gc_cycles={summary['gc_cycles']:.0f} "
            f"reclaimed={summary['reclaimed']:.0f} peak_live={summary['peak_live']:.0f} "
            f"elapsed={summary['elapsed_s']:.3f}s"
        )

    write_results(args.output, rows)


def write_results(path: str, rows: Sequence[Dict[str, float]]) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    fieldnames = sorted({key for row in rows for key in row.keys()})
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


if __name__ == "__main__":
    main()
