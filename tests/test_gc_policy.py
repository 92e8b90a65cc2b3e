import unittest

from marksweep import AdaptiveThresholdPolicy, GCPolicy, Runtime, StressPolicy


class EveryNthAllocationPolicy(GCPolicy):
    def __init__(self, interval: int) -> None:
        self.interval = interval
        self.calls = 0
        self.notified_events = []

    def should_trigger(self, runtime: Runtime, reason: str) -> bool:
        self.calls += 1
        return self.calls % self.interval == 0

    def notify_gc(self, runtime: Runtime, event: dict) -> None:
        self.notified_events.append(event)


class GCPolicyTests(unittest.TestCase):
    def test_custom_policy_is_consulted_on_every_allocation(self) -> None:
        policy = EveryNthAllocationPolicy(interval=3)
        runtime = Runtime(policy=policy)
        for value in range(6):
            runtime.push_integer(value)
        self.assertEqual(policy.calls, 6)
        self.assertEqual(len(runtime.gc_events), 2)
        self.assertEqual(policy.notified_events, runtime.gc_events)
        self.assertEqual(runtime.gc_events[0]["trigger"], "policy:EveryNthAllocationPolicy")

    def test_stress_policy_collects_before_each_allocation(self) -> None:
        runtime = Runtime(policy=StressPolicy())
        runtime.push_integer(1)
        runtime.push_integer(2)
        pair = runtime.make_pair()
        self.assertEqual(len(runtime.gc_events), 3)
        self.assertEqual([event["live"] for event in runtime.gc_events], [0, 1, 2])
        self.assertEqual(runtime.render(pair), "(1, 2)")

    def test_adaptive_policy_only_reacts_to_allocation(self) -> None:
        policy = AdaptiveThresholdPolicy(initial_threshold=0)
        runtime = Runtime(policy=policy)
        self.assertFalse(policy.should_trigger(runtime, "tick"))
        self.assertTrue(policy.should_trigger(runtime, "allocation"))
        policy.notify_gc(runtime, {"live": 5})
        self.assertEqual(policy.threshold, 10)

    def test_adaptive_policy_rejects_shrinking_factor(self) -> None:
        with self.assertRaises(ValueError):
            AdaptiveThresholdPolicy(growth_factor=0)


if __name__ == "__main__":
    unittest.main()
