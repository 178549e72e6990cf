"""Runtime settings and campaign configuration loading."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .db.engine import DEFAULT_SQLITE_URL, ROOT_DIR
from .db.utils import resolve_sqlite_url
from .draw.catalog import Catalog
from .draw.errors import ConfigurationError
from .draw.geometry import DEFAULT_MIN_ROTATIONS
from .draw.rules import RuleTable
from .spin.session import DEFAULT_SPIN_DURATION

DEFAULT_TIMEZONE = "America/Sao_Paulo"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings read from the environment.

    Attributes
    ----------
    timezone : str
        IANA zone used to turn the wall clock into a rule-table date.
    spin_duration : float
        Seconds between spin and reveal.
    min_rotations : int
        Full wheel turns before landing.
    strict_geometry : bool
        Raise on reward codes missing from the wheel instead of landing on
        segment 0. Enable in development and tests.
    database_url : str
        SQLAlchemy URL of the configuration database.
    """

    timezone: str = DEFAULT_TIMEZONE
    spin_duration: float = DEFAULT_SPIN_DURATION
    min_rotations: int = DEFAULT_MIN_ROTATIONS
    strict_geometry: bool = False
    database_url: str = DEFAULT_SQLITE_URL

    @property
    def tzinfo(self) -> ZoneInfo:
        return zone_info(self.timezone)


def zone_info(name: str) -> ZoneInfo:
    """Return the :class:`ZoneInfo` for ``name`` or raise :class:`ConfigurationError`."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {name!r}") from exc


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")


def _env_number(environ: Mapping[str, str], name: str, default, cast):
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (defaults to ``os.environ`` after ``.env``).

    Raises
    ------
    ConfigurationError
        If a variable holds an invalid value.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    timezone_name = environ.get("PRIZEWHEEL_TIMEZONE") or DEFAULT_TIMEZONE
    zone_info(timezone_name)

    duration_ms = _env_number(
        environ, "PRIZEWHEEL_SPIN_DURATION_MS", DEFAULT_SPIN_DURATION * 1000, float
    )
    if duration_ms < 0:
        raise ConfigurationError("PRIZEWHEEL_SPIN_DURATION_MS must not be negative")

    min_rotations = _env_number(
        environ, "PRIZEWHEEL_MIN_ROTATIONS", DEFAULT_MIN_ROTATIONS, int
    )
    if min_rotations < 1:
        raise ConfigurationError("PRIZEWHEEL_MIN_ROTATIONS must be at least 1")

    database_url = environ.get("DB_URL")
    return Settings(
        timezone=timezone_name,
        spin_duration=duration_ms / 1000,
        min_rotations=min_rotations,
        strict_geometry=_env_bool(environ, "PRIZEWHEEL_STRICT_GEOMETRY", False),
        database_url=(
            resolve_sqlite_url(database_url, ROOT_DIR) if database_url else DEFAULT_SQLITE_URL
        ),
    )


@dataclass(frozen=True)
class CampaignConfig:
    """Everything a draw needs for one campaign, validated and immutable."""

    slug: str
    name: Optional[str]
    timezone: str
    catalog: Catalog
    rule_table: RuleTable

    def __post_init__(self) -> None:
        zone_info(self.timezone)
        self.rule_table.validate_against(self.catalog)


def campaign_from_dict(data: Mapping[str, Any]) -> CampaignConfig:
    """Build a :class:`CampaignConfig` from plain data.

    Expected shape::

        {
            "slug": "black-friday-2025",
            "name": "...",
            "timezone": "America/Sao_Paulo",
            "rewards": [{"code": "...", "label": "..."}, ...],
            "rules": {"2025-11-10": [{"range": [1, 40], "code": "..."}, ...]}
        }
    """
    try:
        slug = data["slug"]
        rewards = data["rewards"]
    except KeyError as exc:
        raise ConfigurationError(f"Campaign definition is missing {exc.args[0]!r}") from exc

    return CampaignConfig(
        slug=slug,
        name=data.get("name"),
        timezone=data.get("timezone") or DEFAULT_TIMEZONE,
        catalog=Catalog.from_items(rewards),
        rule_table=RuleTable.from_mapping(data.get("rules") or {}),
    )


def load_campaign_file(path: Union[str, Path]) -> CampaignConfig:
    """Load a campaign definition from a JSON file."""

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a JSON object")
    return campaign_from_dict(data)


__all__ = [
    "CampaignConfig",
    "DEFAULT_TIMEZONE",
    "Settings",
    "campaign_from_dict",
    "load_campaign_file",
    "load_settings",
    "zone_info",
]
