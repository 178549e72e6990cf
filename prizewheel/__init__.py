"""Date-scoped prize wheel: weighted draws, wheel geometry and spin sessions."""

from .config import CampaignConfig, Settings, load_campaign_file, load_settings
from .draw import (
    Catalog,
    ConfigurationError,
    DayRuleSet,
    DrawEngine,
    DrawResult,
    Reward,
    RewardRange,
    RuleTable,
    UnknownRewardCode,
    WheelGeometry,
    angle_for,
)
from .spin import ActivationGate, AsyncioScheduler, SpinPhase, SpinSession

__all__ = [
    "ActivationGate",
    "AsyncioScheduler",
    "CampaignConfig",
    "Catalog",
    "ConfigurationError",
    "DayRuleSet",
    "DrawEngine",
    "DrawResult",
    "Reward",
    "RewardRange",
    "RuleTable",
    "Settings",
    "SpinPhase",
    "SpinSession",
    "UnknownRewardCode",
    "WheelGeometry",
    "angle_for",
    "load_campaign_file",
    "load_settings",
]
