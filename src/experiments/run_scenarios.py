from __future__ import annotations

import argparse
from typing import List, Optional

from marksweep import RuntimeConfig
from experiments.instrumentation import HeapProfiler
from experiments.scenarios import SCENARIOS, ScenarioResult


def format_event(event: dict) -> str:
    return f"Collected {event['freed']} objects, {event['live']} left."


def format_stats(stats: dict) -> str:
    return (
        f"   stats: collections={stats['collections']} heap_slots={stats['heap_slots']} "
        f"free_slots={stats['free_slots']} objects={stats['objects']}"
    )


def run_scenarios(
    names: List[str],
    config: RuntimeConfig,
    *,
    output_dir: Optional[str] = None,
) -> List[ScenarioResult]:
    results: List[ScenarioResult] = []
    for index, name in enumerate(names, start=1):
        profiler = HeapProfiler(run_id=f"scenario_{name}", output_dir=output_dir)
        result = SCENARIOS[name](config, profiler)
        print(f"{index}: {result.title}")
        for rendered in result.rendered:
            print(f"   value: {rendered}")
        for event in result.gc_events:
            print(format_event(event))
        print(format_stats(result.stats))
        profiler.flush()
        results.append(result)
    return results


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the mark-and-sweep demonstration scenarios.")
    parser.add_argument(
        "scenarios",
        nargs="*",
        help=f"Scenarios to run, any of {sorted(SCENARIOS)} (default: all, in demonstration order).",
    )
    parser.add_argument("--stack-capacity", type=int, default=256, help="Root stack slots.")
    parser.add_argument("--initial-threshold", type=int, default=8, help="Live objects before the first collection.")
    parser.add_argument("--growth-factor", type=int, default=2, help="Threshold multiplier applied to survivors.")
    parser.add_argument("--output-dir", type=str, default=None, help="Write per-scenario event logs here.")
    args = parser.parse_args(argv)
    unknown = [name for name in args.scenarios if name not in SCENARIOS]
    if unknown:
        parser.error(f"unknown scenario(s): {', '.join(unknown)}")
    return args


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = RuntimeConfig(
        stack_capacity=args.stack_capacity,
        initial_threshold=args.initial_threshold,
        growth_factor=args.growth_factor,
    ).validate()
    names = args.scenarios or list(SCENARIOS)
    run_scenarios(names, config, output_dir=args.output_dir)


if __name__ == "__main__":
    main()
