"""Date-scoped weighted draw engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Union

from .catalog import Catalog
from .rules import RuleTable, date_key

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Subset of :class:`random.Random` used by the engine."""

    def randint(self, a: int, b: int) -> int: ...

    def randrange(self, stop: int) -> int: ...


@dataclass(frozen=True)
class DrawResult:
    """Outcome of a single draw.

    Attributes
    ----------
    reward_code : str
        Code of the drawn reward. Empty when the drawn number fell into a
        configuration gap.
    raw_random_number : int
        The number drawn from ``[1, max_range]``, or the catalog index picked
        by a fallback draw.
    matched : bool
        ``True`` only when a date-specific range resolved the draw.
    date_key : Optional[str]
        Date the draw was resolved for; ``None`` for a standalone fallback.
    fallback : bool
        ``True`` when the reward was picked with equal probability over the
        catalog.
    """

    reward_code: str
    raw_random_number: int
    matched: bool
    date_key: Optional[str] = None
    fallback: bool = False

    @property
    def is_resolved(self) -> bool:
        """Whether the result names a reward at all."""
        return bool(self.reward_code)


class DrawEngine:
    """Draw rewards for a date using a :class:`RuleTable` and :class:`Catalog`.

    The engine holds no mutable state; the same instance can serve every
    session of a campaign.
    """

    def __init__(self, catalog: Catalog, rule_table: RuleTable) -> None:
        self._catalog = catalog
        self._rule_table = rule_table

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def rule_table(self) -> RuleTable:
        return self._rule_table

    def draw(self, day: Union[date, str], random_source: RandomSource) -> DrawResult:
        """Draw a reward for ``day``.

        Parameters
        ----------
        day : date | str
            Calendar date in the campaign timezone, already resolved by the
            caller.
        random_source : RandomSource
            Source of uniform integers, typically :class:`random.SystemRandom`.

        Returns
        -------
        DrawResult
            ``matched=True`` when a range covered the drawn number. A date
            without rules yields a fallback draw; a number in a configuration
            gap yields an unresolved result with an empty ``reward_code``.

        Notes
        -----
        1. Resolve the day's rule set; without one, fall back to an equal
           chance over the catalog.
        2. Draw ``n`` uniformly from ``[1, max_range]``.
        3. Return the first range, in declared order, that contains ``n``.
        """
        key = date_key(day)
        rule_set = self._rule_table.resolve_day_rule_set(key)
        if rule_set is None:
            result = self.draw_fallback(random_source, day_key=key)
            logger.info(
                "%s - no rules for date, equal-chance draw index %d - %s",
                key,
                result.raw_random_number,
                result.reward_code,
            )
            return result

        space = rule_set.draw_space(len(self._catalog))
        number = random_source.randint(space.start, space.stop - 1)
        match = rule_set.covering(number)
        if match is None:
            logger.warning("%s - number %d is outside every configured range", key, number)
            return DrawResult(
                reward_code="", raw_random_number=number, matched=False, date_key=key
            )

        logger.info(
            "%s - number %d - range [%d, %d] - %s",
            key,
            number,
            match.lower_bound,
            match.upper_bound,
            match.reward_code,
        )
        return DrawResult(
            reward_code=match.reward_code,
            raw_random_number=number,
            matched=True,
            date_key=key,
        )

    def draw_fallback(
        self, random_source: RandomSource, *, day_key: Optional[str] = None
    ) -> DrawResult:
        """Pick a catalog entry with equal probability, ignoring the rule table."""

        index = random_source.randrange(len(self._catalog))
        return DrawResult(
            reward_code=self._catalog[index].code,
            raw_random_number=index,
            matched=False,
            date_key=day_key,
            fallback=True,
        )


__all__ = ["DrawEngine", "DrawResult", "RandomSource"]
