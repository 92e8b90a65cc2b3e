import csv
import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from marksweep import RuntimeConfig
from experiments import gc_benchmark, run_scenarios
from experiments.scenarios import (
    allocation_churn,
    cycles_are_collected,
    nested_objects_are_reached,
    objects_on_stack_are_preserved,
    unreached_objects_are_collected,
)


def freed_and_live(result):
    return [(event["freed"], event["live"]) for event in result.gc_events]


class ScenarioTests(unittest.TestCase):
    def test_objects_on_stack_are_preserved(self) -> None:
        result = objects_on_stack_are_preserved()
        self.assertEqual(freed_and_live(result), [(0, 2), (2, 0)])

    def test_unreached_objects_are_collected(self) -> None:
        result = unreached_objects_are_collected()
        self.assertEqual(freed_and_live(result), [(2, 0), (0, 0)])

    def test_nested_objects_are_reached(self) -> None:
        result = nested_objects_are_reached()
        self.assertEqual(freed_and_live(result), [(0, 7), (7, 0)])
        self.assertEqual(result.rendered, ["((1, 2), (3, 4))"])
        self.assertEqual(result.stats["collections"], 2)
        self.assertEqual(result.stats["objects"], 0)
        self.assertTrue(result.stats["closed"])

    def test_cycles_are_collected(self) -> None:
        result = cycles_are_collected()
        self.assertEqual(freed_and_live(result), [(2, 4), (4, 0), (0, 0)])
        self.assertEqual(result.gc_events[-1]["trigger"], "shutdown")

    def test_allocation_churn_reclaims_every_leaf(self) -> None:
        result = allocation_churn(rounds=200, burst=20)
        self.assertEqual(result.total_freed, 4000)
        self.assertEqual(result.gc_events[-1]["live"], 0)
        self.assertTrue(all(event["live"] < 20 for event in result.gc_events))

    def test_scenarios_honour_config(self) -> None:
        result = allocation_churn(RuntimeConfig(initial_threshold=1000), rounds=10, burst=5)
        self.assertEqual(freed_and_live(result), [(50, 0)])


class ScenarioCliTests(unittest.TestCase):
    def test_prints_titles_and_collection_lines(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            run_scenarios.main(["preserved", "nested"])
        output = buffer.getvalue().splitlines()
        self.assertEqual(output[0], "1: Objects on the stack are preserved.")
        self.assertIn("Collected 0 objects, 2 left.", output)
        self.assertIn("Collected 2 objects, 0 left.", output)
        self.assertIn("2: Reach the nested objects.", output)
        self.assertIn("   value: ((1, 2), (3, 4))", output)
        self.assertIn("   stats: collections=2 heap_slots=2 free_slots=2 objects=0", output)
        self.assertIn("   stats: collections=2 heap_slots=7 free_slots=7 objects=0", output)

    def test_writes_event_logs(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            with redirect_stdout(io.StringIO()):
                run_scenarios.main(["unreached", "--output-dir", tmpdir])
            self.assertTrue((Path(tmpdir) / "scenario_unreached.jsonl").exists())
            self.assertTrue((Path(tmpdir) / "scenario_unreached.csv").exists())

    def test_unknown_scenario_is_an_error(self) -> None:
        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                run_scenarios.main(["nonsense"])


class BenchmarkTests(unittest.TestCase):
    def test_churn_without_retention_leaves_nothing_reachable(self) -> None:
        summary = gc_benchmark.run_churn_trial(RuntimeConfig(), stress=False, rounds=50, burst=10, retained=0)
        self.assertEqual(summary["allocations"], 500.0)
        self.assertEqual(summary["reclaimed"], 500.0)
        self.assertEqual(summary["reachable_at_end"], 0.0)
        self.assertGreater(summary["gc_cycles"], 1.0)
        self.assertGreaterEqual(summary["peak_live"], 10.0)

    def test_retained_values_stay_reachable_under_every_policy(self) -> None:
        for stress in (False, True):
            with self.subTest(stress=stress):
                summary = gc_benchmark.run_churn_trial(
                    RuntimeConfig(), stress=stress, rounds=50, burst=10, retained=2
                )
                self.assertEqual(summary["reachable_at_end"], 198.0)
                self.assertEqual(summary["allocations"], 598.0)
                self.assertEqual(summary["reclaimed"], 598.0)

    def test_main_applies_threshold_options_per_variant(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            output = Path(tmpdir) / "out" / "bench.csv"
            with redirect_stdout(io.StringIO()):
                gc_benchmark.main(
                    [
                        "--rounds", "20",
                        "--burst", "5",
                        "--initial-threshold", "4",
                        "--growth-factor", "3",
                        "--variants", "adaptive", "adaptive_x4", "stress",
                        "--output", str(output),
                    ]
                )
            with output.open(newline="", encoding="utf-8") as handle:
                rows = list(csv.DictReader(handle))
        self.assertEqual([row["variant"] for row in rows], ["adaptive", "adaptive_x4", "stress"])
        self.assertEqual([float(row["initial_threshold"]) for row in rows], [4.0, 4.0, 4.0])
        self.assertEqual(float(rows[0]["growth_factor"]), 3.0)
        self.assertEqual(float(rows[1]["growth_factor"]), 4.0)


if __name__ == "__main__":
    unittest.main()
