from __future__ import annotations

import random
import unittest
from collections import Counter
from datetime import date

from prizewheel.draw import (
    DayRuleSet,
    DrawEngine,
    DrawResult,
    RewardRange,
    RuleTable,
    keep_unresolved,
    resample_with_fallback,
)
from tests.helpers import SCENARIO_CATALOG, SCENARIO_RULES, ForcedRandom

SCENARIO_DATE = date(2025, 11, 10)


class ConfiguredDateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = DrawEngine(SCENARIO_CATALOG, SCENARIO_RULES)

    def _draw(self, number: int) -> DrawResult:
        return self.engine.draw(SCENARIO_DATE, ForcedRandom(randints=[number]))

    def test_forced_numbers_resolve_to_expected_rewards(self) -> None:
        for number, expected in ((25, "A"), (43, "B"), (49, "D")):
            with self.subTest(number=number):
                result = self._draw(number)
                self.assertEqual(result.reward_code, expected)
                self.assertEqual(result.raw_random_number, number)
                self.assertTrue(result.matched)
                self.assertFalse(result.fallback)
                self.assertEqual(result.date_key, "2025-11-10")

    def test_draw_space_is_one_to_max_range(self) -> None:
        rng = ForcedRandom(randints=[1])
        self.engine.draw(SCENARIO_DATE, rng)
        self.assertEqual(rng.randint_calls, [(1, 49)])
        self.assertEqual(rng.randrange_calls, [])

    def test_every_number_maps_to_its_first_covering_range(self) -> None:
        rule_set = SCENARIO_RULES["2025-11-10"]
        for number in range(1, 50):
            expected = next(r for r in rule_set if r.lower_bound <= number <= r.upper_bound)
            with self.subTest(number=number):
                self.assertEqual(self._draw(number).reward_code, expected.reward_code)

    def test_zero_scoped_reward_is_unreachable(self) -> None:
        # The generator only ever asks for [1, 49], so 0 and 50 are never drawn.
        rng = ForcedRandom(randints=[1])
        self.engine.draw(SCENARIO_DATE, rng)
        low, high = rng.randint_calls[0]
        self.assertEqual((low, high), (1, 49))
        self.assertNotIn(0, range(low, high + 1))
        self.assertNotIn(50, range(low, high + 1))
        drawn = {self._draw(number).reward_code for number in range(low, high + 1)}
        self.assertEqual(drawn, {"A", "B", "C", "D"})
        self.assertNotIn("E", drawn)

    def test_zero_scoped_reward_never_appears_with_real_randomness(self) -> None:
        rng = random.Random(20251110)
        codes = Counter(self.engine.draw(SCENARIO_DATE, rng).reward_code for _ in range(5000))
        self.assertEqual(codes["E"], 0)
        self.assertEqual(set(codes), {"A", "B", "C", "D"})

    def test_overlapping_ranges_resolve_in_declaration_order(self) -> None:
        table = RuleTable(
            [
                DayRuleSet(
                    "2025-11-10",
                    (RewardRange(1, 10, "B"), RewardRange(5, 20, "A")),
                )
            ]
        )
        engine = DrawEngine(SCENARIO_CATALOG, table)
        self.assertEqual(engine.draw("2025-11-10", ForcedRandom([7])).reward_code, "B")
        self.assertEqual(engine.draw("2025-11-10", ForcedRandom([15])).reward_code, "A")

    def test_gap_returns_unresolved_result(self) -> None:
        table = RuleTable(
            [DayRuleSet("2025-11-10", (RewardRange(1, 3, "A"), RewardRange(6, 8, "B")))]
        )
        engine = DrawEngine(SCENARIO_CATALOG, table)
        with self.assertLogs("prizewheel.draw.engine", level="WARNING"):
            result = engine.draw("2025-11-10", ForcedRandom([4]))
        self.assertEqual(result.reward_code, "")
        self.assertFalse(result.matched)
        self.assertFalse(result.is_resolved)
        self.assertFalse(result.fallback)
        self.assertEqual(result.raw_random_number, 4)

    def test_empty_day_uses_catalog_size_as_max_range(self) -> None:
        engine = DrawEngine(SCENARIO_CATALOG, RuleTable([DayRuleSet("2025-11-10", ())]))
        rng = ForcedRandom(randints=[3])
        result = engine.draw("2025-11-10", rng)
        self.assertEqual(rng.randint_calls, [(1, 5)])
        self.assertFalse(result.is_resolved)

    def test_zero_only_day_draws_one(self) -> None:
        table = RuleTable([DayRuleSet("2025-11-10", (RewardRange(0, 0, "E"),))])
        engine = DrawEngine(SCENARIO_CATALOG, table)
        rng = ForcedRandom(randints=[1])
        result = engine.draw("2025-11-10", rng)
        self.assertEqual(rng.randint_calls, [(1, 1)])
        self.assertFalse(result.is_resolved)


class FallbackTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = DrawEngine(SCENARIO_CATALOG, SCENARIO_RULES)

    def test_unconfigured_date_uses_catalog_index(self) -> None:
        rng = ForcedRandom(randranges=[3])
        result = self.engine.draw(date(2026, 1, 1), rng)
        self.assertEqual(result.reward_code, "D")
        self.assertEqual(result.raw_random_number, 3)
        self.assertFalse(result.matched)
        self.assertTrue(result.fallback)
        self.assertEqual(result.date_key, "2026-01-01")
        self.assertEqual(rng.randrange_calls, [5])
        self.assertEqual(rng.randint_calls, [])

    def test_fallback_converges_to_uniform(self) -> None:
        rng = random.Random(42)
        counts = Counter(
            self.engine.draw(date(2026, 1, 1), rng).reward_code for _ in range(10_000)
        )
        self.assertEqual(set(counts), set(SCENARIO_CATALOG.codes))
        for code in SCENARIO_CATALOG.codes:
            with self.subTest(code=code):
                self.assertLessEqual(abs(counts[code] - 2000), 150)


class RecoveryPolicyTests(unittest.TestCase):
    def setUp(self) -> None:
        table = RuleTable([DayRuleSet("2025-11-10", (RewardRange(1, 3, "A"),
                                                     RewardRange(6, 8, "B")))])
        self.engine = DrawEngine(SCENARIO_CATALOG, table)

    def test_resample_replaces_unresolved_result(self) -> None:
        rng = ForcedRandom(randints=[5], randranges=[2])
        with self.assertLogs("prizewheel.draw", level="INFO"):
            unresolved = self.engine.draw("2025-11-10", rng)
        recovered = resample_with_fallback(self.engine, unresolved, rng)
        self.assertEqual(recovered.reward_code, "C")
        self.assertTrue(recovered.fallback)
        self.assertEqual(recovered.date_key, "2025-11-10")

    def test_resample_keeps_resolved_result(self) -> None:
        rng = ForcedRandom(randints=[2])
        resolved = self.engine.draw("2025-11-10", rng)
        self.assertIs(resample_with_fallback(self.engine, resolved, rng), resolved)
        self.assertEqual(rng.randrange_calls, [])

    def test_keep_unresolved_returns_input(self) -> None:
        rng = ForcedRandom(randints=[4])
        unresolved = self.engine.draw("2025-11-10", rng)
        self.assertIs(keep_unresolved(self.engine, unresolved, rng), unresolved)


if __name__ == "__main__":
    unittest.main()
