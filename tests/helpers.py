"""Shared doubles for the test suite."""

from __future__ import annotations

from collections import deque
from typing import Callable, Iterable

from prizewheel.draw import Catalog, RuleTable

SCENARIO_CATALOG = Catalog.from_items(
    [{"code": code, "label": code} for code in ("A", "B", "C", "D", "E")]
)
SCENARIO_RULES = RuleTable.from_mapping(
    {
        "2025-11-10": [
            {"range": [1, 40], "code": "A"},
            {"range": [41, 45], "code": "B"},
            {"range": [46, 47], "code": "C"},
            {"range": [48, 49], "code": "D"},
            {"range": [0], "code": "E"},
        ]
    }
)


class ForcedRandom:
    """Random source that replays queued values and records the requested bounds."""

    def __init__(self, randints: Iterable[int] = (), randranges: Iterable[int] = ()) -> None:
        self._randints = deque(randints)
        self._randranges = deque(randranges)
        self.randint_calls: list[tuple[int, int]] = []
        self.randrange_calls: list[int] = []

    def randint(self, a: int, b: int) -> int:
        self.randint_calls.append((a, b))
        value = self._randints.popleft()
        if not a <= value <= b:
            raise AssertionError(f"forced value {value} outside [{a}, {b}]")
        return value

    def randrange(self, stop: int) -> int:
        self.randrange_calls.append(stop)
        value = self._randranges.popleft()
        if not 0 <= value < stop:
            raise AssertionError(f"forced index {value} outside [0, {stop})")
        return value


class ManualScheduler:
    """Scheduler that only runs callbacks when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._pending: list[tuple[float, Callable[[], None]]] = []

    @property
    def pending(self) -> int:
        return len(self._pending)

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self._pending.append((self.now + delay, callback))

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [item for item in self._pending if item[0] <= self.now]
        self._pending = [item for item in self._pending if item[0] > self.now]
        for _, callback in sorted(due, key=lambda item: item[0]):
            callback()
