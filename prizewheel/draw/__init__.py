"""Catalog, rule table, draw engine and wheel geometry."""

from .catalog import Catalog, Reward
from .engine import DrawEngine, DrawResult, RandomSource
from .errors import ConfigurationError, UnknownRewardCode
from .geometry import DEFAULT_MIN_ROTATIONS, WheelGeometry, angle_for, segment_angle
from .recovery import RecoveryPolicy, keep_unresolved, resample_with_fallback
from .rules import DayRuleSet, RewardRange, RuleTable, date_key

__all__ = [
    "Catalog",
    "ConfigurationError",
    "DEFAULT_MIN_ROTATIONS",
    "DayRuleSet",
    "DrawEngine",
    "DrawResult",
    "RandomSource",
    "RecoveryPolicy",
    "Reward",
    "RewardRange",
    "RuleTable",
    "UnknownRewardCode",
    "WheelGeometry",
    "angle_for",
    "date_key",
    "keep_unresolved",
    "resample_with_fallback",
    "segment_angle",
]
