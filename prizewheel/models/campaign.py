"""Database models holding campaign configuration.

Only configuration is stored: the reward catalog and the per-day range rules.
Draw results live in the visitor's session and are never written here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..db.utils import dt_iso
from ..draw.catalog import Catalog, Reward
from ..draw.rules import DayRuleSet, RewardRange, RuleTable
from .base import Base
from .id_type import ID_TYPE


class Campaign(Base):
    """A promotional wheel campaign with its own catalog, rules and timezone."""

    __tablename__ = "campaigns"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    """Machine friendly identifier used to load the campaign."""

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Optional human readable title."""

    timezone: Mapped[str] = mapped_column(String(64), nullable=False)
    """IANA timezone in which rule dates are interpreted."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    """Timestamp when the campaign was created."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    """Timestamp bumped whenever the campaign row changes."""

    rewards: Mapped[list["CampaignReward"]] = relationship(
        back_populates="campaign",
        cascade="all, delete-orphan",
        order_by="CampaignReward.position",
    )
    """Catalog rows in wheel order."""

    rules: Mapped[list["CampaignRangeRule"]] = relationship(
        back_populates="campaign",
        cascade="all, delete-orphan",
        order_by="[CampaignRangeRule.date_key, CampaignRangeRule.position]",
    )
    """Range rules ordered by date, then declaration order."""

    def __init__(
        self,
        *,
        slug: str,
        timezone: str,
        name: Optional[str] = None,
        rewards: Optional[list["CampaignReward"]] = None,
        rules: Optional[list["CampaignRangeRule"]] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        self.slug = slug
        self.timezone = timezone
        self.name = name
        if rewards is not None:
            self.rewards = rewards
        if rules is not None:
            self.rules = rules
        if created_at is not None:
            self.created_at = created_at
        if updated_at is not None:
            self.updated_at = updated_at

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Campaign(id={id}, slug={slug}, timezone={tz})>".format(
            id=self.id,
            slug=self.slug,
            tz=self.timezone,
        )

    @classmethod
    def get_by_slug(cls, session: Session, slug: str) -> Optional["Campaign"]:
        """Return the campaign matching ``slug`` if it exists."""

        return session.scalar(select(cls).where(cls.slug == slug))

    def to_catalog(self) -> Catalog:
        """Build the immutable :class:`Catalog` from the reward rows."""

        ordered = sorted(self.rewards, key=lambda r: r.position)
        return Catalog(tuple(Reward(code=r.code, label=r.label) for r in ordered))

    def to_rule_table(self) -> RuleTable:
        """Build the immutable :class:`RuleTable` from the rule rows.

        Rows are grouped by date and kept in ``position`` order, which is the
        first-match order used by the draw engine.
        """

        grouped: dict[str, list[CampaignRangeRule]] = {}
        for rule in self.rules:
            grouped.setdefault(rule.date_key, []).append(rule)
        day_sets = [
            DayRuleSet(
                key,
                tuple(
                    RewardRange(r.lower_bound, r.upper_bound, r.reward_code)
                    for r in sorted(rows, key=lambda row: row.position)
                ),
            )
            for key, rows in sorted(grouped.items())
        ]
        return RuleTable(day_sets)

    def to_json(self) -> dict:
        """Serialize the campaign in the shape accepted by ``campaign_from_dict``."""

        rules: dict[str, list[dict]] = {}
        for rule in sorted(self.rules, key=lambda r: (r.date_key, r.position)):
            rules.setdefault(rule.date_key, []).append(
                {"range": [rule.lower_bound, rule.upper_bound], "code": rule.reward_code}
            )
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "timezone": self.timezone,
            "rewards": [
                {"code": r.code, "label": r.label}
                for r in sorted(self.rewards, key=lambda r: r.position)
            ],
            "rules": rules,
            "created_at": dt_iso(self.created_at),
            "updated_at": dt_iso(self.updated_at),
        }


class CampaignReward(Base):
    """One catalog entry; ``position`` is its wheel segment."""

    __tablename__ = "campaign_rewards"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    campaign_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)

    campaign: Mapped["Campaign"] = relationship(back_populates="rewards")

    __table_args__ = (
        UniqueConstraint("campaign_id", "code", name="campaign_rewards_code_key"),
        UniqueConstraint("campaign_id", "position", name="campaign_rewards_position_key"),
    )

    def __init__(
        self,
        *,
        position: int,
        code: str,
        label: str,
        campaign: Optional["Campaign"] = None,
    ) -> None:
        self.position = position
        self.code = code
        self.label = label
        if campaign is not None:
            self.campaign = campaign

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            "<CampaignReward("
            f"id={self.id}, campaign_id={self.campaign_id}, "
            f"position={self.position}, code='{self.code}'"
            ")>"
        )


class CampaignRangeRule(Base):
    """A single inclusive range of a day's rule set."""

    __tablename__ = "campaign_range_rules"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    campaign_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date_key: Mapped[str] = mapped_column(String(10), nullable=False)
    """Calendar date in ``YYYY-MM-DD`` form, in the campaign timezone."""

    position: Mapped[int] = mapped_column(Integer, nullable=False)
    """Declaration order within the day; lower positions win overlaps."""

    lower_bound: Mapped[int] = mapped_column(Integer, nullable=False)
    upper_bound: Mapped[int] = mapped_column(Integer, nullable=False)
    reward_code: Mapped[str] = mapped_column(String(64), nullable=False)

    campaign: Mapped["Campaign"] = relationship(back_populates="rules")

    __table_args__ = (
        UniqueConstraint(
            "campaign_id",
            "date_key",
            "position",
            name="campaign_range_rules_position_key",
        ),
        CheckConstraint("lower_bound <= upper_bound", name="bounds_ordered"),
    )

    def __init__(
        self,
        *,
        date_key: str,
        position: int,
        lower_bound: int,
        upper_bound: int,
        reward_code: str,
        campaign: Optional["Campaign"] = None,
    ) -> None:
        self.date_key = date_key
        self.position = position
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound
        self.reward_code = reward_code
        if campaign is not None:
            self.campaign = campaign

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            "<CampaignRangeRule("
            f"date_key={self.date_key}, position={self.position}, "
            f"range=[{self.lower_bound}, {self.upper_bound}], code='{self.reward_code}'"
            ")>"
        )
