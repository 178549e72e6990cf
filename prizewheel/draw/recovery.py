"""Recovery policies for draws that land in a configuration gap.

The engine reports a gap as an unresolved :class:`DrawResult` and leaves the
decision to its caller. A policy is a callable
``(engine, result, random_source) -> DrawResult`` handed to the spin session.
"""

from __future__ import annotations

import logging
from typing import Callable

from .engine import DrawEngine, DrawResult, RandomSource

logger = logging.getLogger(__name__)

RecoveryPolicy = Callable[[DrawEngine, DrawResult, RandomSource], DrawResult]


def resample_with_fallback(
    engine: DrawEngine, result: DrawResult, random_source: RandomSource
) -> DrawResult:
    """Replace an unresolved result with an equal-chance draw over the catalog."""

    if result.is_resolved:
        return result
    recovered = engine.draw_fallback(random_source, day_key=result.date_key)
    logger.info(
        "%s - number %d unresolved, resampled with equal chance - %s",
        result.date_key,
        result.raw_random_number,
        recovered.reward_code,
    )
    return recovered


def keep_unresolved(
    engine: DrawEngine, result: DrawResult, random_source: RandomSource
) -> DrawResult:
    """Return the result untouched; the caller shows "no prize" for a gap."""
    return result


__all__ = ["RecoveryPolicy", "keep_unresolved", "resample_with_fallback"]
