from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .campaign import (  # noqa: F401
    Campaign,
    CampaignReward,
    CampaignRangeRule,
)

__all__ = [
    "Base",
    "Campaign",
    "CampaignReward",
    "CampaignRangeRule",
]
