"""Wheel rotation geometry."""

from __future__ import annotations

import logging

from .catalog import Catalog
from .errors import UnknownRewardCode

logger = logging.getLogger(__name__)

DEFAULT_MIN_ROTATIONS = 4


def segment_angle(catalog: Catalog) -> float:
    """Angular width in degrees of one catalog segment."""
    return 360 / len(catalog)


def angle_for(
    reward_code: str, catalog: Catalog, *, min_rotations: int = DEFAULT_MIN_ROTATIONS
) -> float:
    """Return the absolute rotation that lands ``reward_code`` under the pointer.

    The wheel always turns ``min_rotations`` full turns and then backs off by
    the segment index, so the target does not depend on any earlier rotation.
    The value is not reduced modulo 360.

    Raises
    ------
    UnknownRewardCode
        If ``reward_code`` is not part of ``catalog``.
    """
    index = catalog.index_of(reward_code)
    return 360 * min_rotations - index * segment_angle(catalog)


class WheelGeometry:
    """Rotation calculator bound to a catalog.

    Parameters
    ----------
    catalog : Catalog
        Wheel segments in display order.
    min_rotations : int, default: 4
        Full turns performed before landing.
    strict : bool, default: True
        Raise :class:`UnknownRewardCode` for codes missing from the catalog.
        With ``strict=False`` the error is logged and the wheel lands on
        segment 0 instead.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        min_rotations: int = DEFAULT_MIN_ROTATIONS,
        strict: bool = True,
    ) -> None:
        if min_rotations < 1:
            raise ValueError("min_rotations must be at least 1")
        self.catalog = catalog
        self.min_rotations = min_rotations
        self.strict = strict

    def angle_for(self, reward_code: str) -> float:
        try:
            return angle_for(reward_code, self.catalog, min_rotations=self.min_rotations)
        except UnknownRewardCode:
            if self.strict:
                raise
            logger.error(
                "Reward code %r is not on the wheel; landing on segment 0", reward_code
            )
            return 360.0 * self.min_rotations


__all__ = ["DEFAULT_MIN_ROTATIONS", "WheelGeometry", "angle_for", "segment_angle"]
