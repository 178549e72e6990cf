"""Date-scoped reward rules.

A :class:`RuleTable` maps calendar dates (``YYYY-MM-DD`` in the campaign
timezone) to a :class:`DayRuleSet`: an ordered list of inclusive integer
ranges, each pointing at a reward code. The draw engine picks a number in
``[1, max_range]`` and the first range containing it wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from fractions import Fraction
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Sequence, Union

from .catalog import Catalog
from .errors import ConfigurationError


def date_key(value: Union[date, str]) -> str:
    """Normalize a calendar date to the ``YYYY-MM-DD`` key used by rule tables.

    ``datetime`` values are truncated to their own calendar date; convert them
    to the campaign timezone first.
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()).isoformat()
        except ValueError as exc:
            raise ValueError(f"Invalid date key {value!r}; expected YYYY-MM-DD") from exc
    raise TypeError("date must be a datetime.date or a YYYY-MM-DD string")


@dataclass(frozen=True)
class RewardRange:
    """Inclusive integer range mapped to a reward code.

    Attributes
    ----------
    lower_bound : int
        Smallest drawn number that selects ``reward_code``.
    upper_bound : int
        Largest drawn number that selects ``reward_code``. May equal
        ``lower_bound``; ``[0, 0]`` is a valid (if unreachable) range.
    reward_code : str
        Code of the catalog reward this range awards.
    """

    lower_bound: int
    upper_bound: int
    reward_code: str

    def __post_init__(self) -> None:
        if self.lower_bound > self.upper_bound:
            raise ConfigurationError(
                f"Range [{self.lower_bound}, {self.upper_bound}] for "
                f"{self.reward_code!r} has lower bound above upper bound"
            )

    @classmethod
    def from_bounds(cls, bounds: Sequence[int], reward_code: str) -> "RewardRange":
        """Create a range from ``[lower, upper]`` or a single-value ``[n]`` list."""

        if len(bounds) == 1:
            return cls(int(bounds[0]), int(bounds[0]), reward_code)
        if len(bounds) == 2:
            return cls(int(bounds[0]), int(bounds[1]), reward_code)
        raise ConfigurationError(
            f"Range for {reward_code!r} must have one or two bounds, got {list(bounds)!r}"
        )

    def contains(self, number: int) -> bool:
        return self.lower_bound <= number <= self.upper_bound


@dataclass(frozen=True)
class DayRuleSet:
    """Ordered reward ranges for a single calendar date.

    Declaration order is the tie-break for overlapping ranges and is kept
    exactly as configured. Gaps and unreachable ranges are preserved too: they
    change the odds, and the audit helpers below make them observable instead
    of silently repairing them.
    """

    date_key: str
    ranges: tuple[RewardRange, ...]

    def __post_init__(self) -> None:
        try:
            key = date_key(self.date_key)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(str(exc)) from exc
        object.__setattr__(self, "date_key", key)
        object.__setattr__(self, "ranges", tuple(self.ranges))

    def __iter__(self) -> Iterator[RewardRange]:
        return iter(self.ranges)

    def __len__(self) -> int:
        return len(self.ranges)

    def max_range(self, catalog_size: int) -> int:
        """Return the top of the draw space for this day.

        This is the largest upper bound, or ``catalog_size`` when the set holds
        no ranges at all.
        """
        if not self.ranges:
            return catalog_size
        return max(r.upper_bound for r in self.ranges)

    def draw_space(self, catalog_size: int) -> range:
        """Integers the engine can draw for this day.

        A set whose ranges all sit at or below zero collapses to ``{1}``.
        """
        return range(1, max(self.max_range(catalog_size), 1) + 1)

    def covering(self, number: int) -> Optional[RewardRange]:
        """Return the first range (in declared order) containing ``number``."""
        for reward_range in self.ranges:
            if reward_range.contains(number):
                return reward_range
        return None

    def unreachable_ranges(self, catalog_size: int) -> list[RewardRange]:
        """Ranges that can never win: outside the draw space or fully shadowed."""

        space = self.draw_space(catalog_size)
        winners = {id(self.covering(n)) for n in space}
        return [r for r in self.ranges if id(r) not in winners]

    def gaps(self, catalog_size: int) -> list[int]:
        """Numbers in the draw space that no range covers."""
        return [n for n in self.draw_space(catalog_size) if self.covering(n) is None]

    def odds(self, catalog_size: int) -> dict[str, Fraction]:
        """Exact probability of each reward code under first-match resolution.

        The empty string key holds the probability of an unresolved draw.
        """
        space = self.draw_space(catalog_size)
        counts: dict[str, int] = {}
        for n in space:
            match = self.covering(n)
            code = match.reward_code if match is not None else ""
            counts[code] = counts.get(code, 0) + 1
        return {code: Fraction(count, len(space)) for code, count in counts.items()}


class RuleTable(Mapping[str, DayRuleSet]):
    """Read-only mapping from date key to :class:`DayRuleSet`."""

    def __init__(self, day_rule_sets: Iterable[DayRuleSet] = ()) -> None:
        table: dict[str, DayRuleSet] = {}
        for rule_set in day_rule_sets:
            if rule_set.date_key in table:
                raise ConfigurationError(
                    f"Duplicate rule set for date {rule_set.date_key}"
                )
            table[rule_set.date_key] = rule_set
        self._table = MappingProxyType(table)

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Iterable[Mapping[str, object]]]
    ) -> "RuleTable":
        """Build a table from ``{"YYYY-MM-DD": [{"range": [a, b], "code": ...}]}``.

        Entries may also use explicit ``lower_bound``/``upper_bound``/``reward_code``
        keys.
        """
        day_sets: list[DayRuleSet] = []
        for key, entries in data.items():
            ranges: list[RewardRange] = []
            for entry in entries:
                ranges.append(_range_from_entry(key, entry))
            day_sets.append(DayRuleSet(key, tuple(ranges)))
        return cls(day_sets)

    def __getitem__(self, key: str) -> DayRuleSet:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<RuleTable(dates={len(self._table)})>"

    def resolve_day_rule_set(self, day: Union[date, str]) -> Optional[DayRuleSet]:
        """Return the rule set configured for ``day``, or ``None``."""
        return self._table.get(date_key(day))

    def referenced_codes(self) -> set[str]:
        return {r.reward_code for rule_set in self._table.values() for r in rule_set}

    def validate_against(self, catalog: Catalog) -> None:
        """Ensure every referenced reward code exists in ``catalog``.

        Raises
        ------
        ConfigurationError
            Listing the unknown codes.
        """
        missing = sorted(code for code in self.referenced_codes() if code not in catalog)
        if missing:
            raise ConfigurationError(
                "Rule table references reward codes missing from the catalog: "
                + ", ".join(missing)
            )


def _range_from_entry(day: str, entry: Mapping[str, object]) -> RewardRange:
    code = entry.get("code", entry.get("reward_code"))
    if not isinstance(code, str) or not code:
        raise ConfigurationError(f"Rule on {day} is missing a reward code: {entry!r}")
    if "range" in entry:
        bounds = entry["range"]
        if not isinstance(bounds, (list, tuple)):
            raise ConfigurationError(f"Rule on {day} has a malformed range: {entry!r}")
        return RewardRange.from_bounds(bounds, code)
    try:
        return RewardRange(int(entry["lower_bound"]), int(entry["upper_bound"]), code)  # type: ignore[arg-type]
    except KeyError as exc:
        raise ConfigurationError(f"Rule on {day} is missing bounds: {entry!r}") from exc


__all__ = ["DayRuleSet", "RewardRange", "RuleTable", "date_key"]
