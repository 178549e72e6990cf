from typing import Callable, Optional, Union
from datetime import date, datetime, timezone

from sqlalchemy.orm import Session

from .config import CampaignConfig, Settings, load_settings, zone_info
from .draw.rules import date_key
from .draw.catalog import Catalog
from .draw.engine import DrawEngine, RandomSource
from .draw.errors import ConfigurationError
from .draw.geometry import WheelGeometry
from .draw.recovery import RecoveryPolicy, resample_with_fallback
from .draw.rules import RuleTable
from .models import Campaign, CampaignRangeRule, CampaignReward
from .spin.gate import ActivationGate
from .spin.scheduler import AsyncioScheduler, Scheduler
from .spin.session import SpinSession


def current_date(timezone_name: str, now: Optional[datetime] = None) -> date:
    """Return today's calendar date in ``timezone_name``.

    Parameters
    ----------
    timezone_name : str
        IANA timezone of the campaign, e.g. ``"America/Sao_Paulo"``.
    now : Optional[datetime]
        Instant to convert. Defaults to the current time. Naive values are
        treated as UTC.

    Returns
    -------
    date
        The local calendar date, which is the key into the rule table.
    """
    tz = zone_info(timezone_name)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).date()


def save_campaign(session: Session, config: CampaignConfig) -> Campaign:
    """Persist ``config`` as a :class:`Campaign`, replacing any existing rows.

    An existing campaign with the same slug keeps its primary key; its rewards
    and rules are replaced wholesale so that positions always mirror the
    in-memory order.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    config : CampaignConfig
        Validated campaign configuration.

    Returns
    -------
    Campaign
        The flushed campaign row.
    """
    campaign = Campaign.get_by_slug(session, config.slug)
    if campaign is None:
        campaign = Campaign(slug=config.slug, timezone=config.timezone)
        session.add(campaign)
    else:
        # Flush the orphan deletes first so new rows do not collide on the
        # (campaign_id, position) unique constraints.
        campaign.rewards.clear()
        campaign.rules.clear()
        session.flush()

    campaign.name = config.name
    campaign.timezone = config.timezone
    campaign.rewards = [
        CampaignReward(position=index, code=reward.code, label=reward.label)
        for index, reward in enumerate(config.catalog)
    ]
    rules: list[CampaignRangeRule] = []
    for key, day_rules in config.rule_table.items():
        for position, reward_range in enumerate(day_rules):
            rules.append(
                CampaignRangeRule(
                    date_key=key,
                    position=position,
                    lower_bound=reward_range.lower_bound,
                    upper_bound=reward_range.upper_bound,
                    reward_code=reward_range.reward_code,
                )
            )
    campaign.rules = rules

    session.flush()
    return campaign


def load_campaign(session: Session, slug: str) -> CampaignConfig:
    """Load the campaign ``slug`` from the database into an immutable config.

    Raises
    ------
    ConfigurationError
        If the campaign does not exist, has no rewards, or its rules reference
        codes missing from its catalog.
    """
    campaign = Campaign.get_by_slug(session, slug)
    if campaign is None:
        raise ConfigurationError(f"Campaign {slug!r} does not exist")
    return CampaignConfig(
        slug=campaign.slug,
        name=campaign.name,
        timezone=campaign.timezone,
        catalog=campaign.to_catalog(),
        rule_table=campaign.to_rule_table(),
    )


def build_engine(config: CampaignConfig) -> DrawEngine:
    """Return a draw engine bound to the campaign's catalog and rule table."""
    return DrawEngine(config.catalog, config.rule_table)


def create_spin_session(
    config: CampaignConfig,
    settings: Optional[Settings] = None,
    *,
    scheduler: Optional[Scheduler] = None,
    gate: Optional[ActivationGate] = None,
    random_source: Optional[RandomSource] = None,
    recovery: RecoveryPolicy = resample_with_fallback,
    engine: Optional[DrawEngine] = None,
    today: Optional[Callable[[], date]] = None,
) -> SpinSession:
    """Create the spin session for one page view of ``config``.

    The session resolves "today" in the campaign timezone and uses the spin
    duration, rotation count and geometry strictness from ``settings``.

    Parameters
    ----------
    config : CampaignConfig
        Campaign being played.
    settings : Optional[Settings]
        Runtime settings; loaded from the environment when omitted.
    scheduler : Optional[Scheduler]
        Reveal scheduler; defaults to :class:`AsyncioScheduler` on the running
        loop, which raises :class:`RuntimeError` when no loop is running.
    gate : Optional[ActivationGate]
        Readiness gate; without one the wheel is immediately interactive.
    random_source : Optional[RandomSource]
        Random source for the draw; defaults to :class:`random.SystemRandom`.
    recovery : RecoveryPolicy
        Policy applied when a draw lands in a configuration gap.
    engine : Optional[DrawEngine]
        Shared engine; built from ``config`` when omitted.
    today : Optional[Callable[[], date]]
        Override for the date provider, mainly for tests.

    Returns
    -------
    SpinSession
        A fresh session in the ``IDLE`` phase.
    """
    if settings is None:
        settings = load_settings()

    def _today() -> date:
        return current_date(config.timezone)

    return SpinSession(
        engine or build_engine(config),
        WheelGeometry(
            config.catalog,
            min_rotations=settings.min_rotations,
            strict=settings.strict_geometry,
        ),
        scheduler or AsyncioScheduler(),
        random_source=random_source,
        today=today or _today,
        gate=gate,
        recovery=recovery,
        spin_duration=settings.spin_duration,
    )


def describe_day(
    config: CampaignConfig, day: Union[date, str]
) -> dict:
    """Summarize the odds configured for ``day``.

    Returns a JSON-friendly dict with the draw space, exact per-code odds as
    fraction strings such as ``"40/49"``, uncovered numbers and ranges that can
    never win. Days without rules report the equal-chance fallback.
    """
    key = date_key(day)
    catalog: Catalog = config.catalog
    rule_table: RuleTable = config.rule_table
    rule_set = rule_table.resolve_day_rule_set(key)
    if rule_set is None:
        share = f"1/{len(catalog)}"
        return {
            "date": key,
            "fallback": True,
            "max_range": len(catalog),
            "odds": {code: share for code in catalog.codes},
            "gaps": [],
            "unreachable": [],
        }
    return {
        "date": key,
        "fallback": False,
        "max_range": rule_set.max_range(len(catalog)),
        "odds": {
            code: str(probability)
            for code, probability in rule_set.odds(len(catalog)).items()
        },
        "gaps": rule_set.gaps(len(catalog)),
        "unreachable": [
            {"range": [r.lower_bound, r.upper_bound], "code": r.reward_code}
            for r in rule_set.unreachable_ranges(len(catalog))
        ],
    }
