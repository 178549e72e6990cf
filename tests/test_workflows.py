from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from pathlib import Path

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from prizewheel.config import Settings, campaign_from_dict, load_campaign_file
from prizewheel.draw import (
    ConfigurationError,
    DrawEngine,
    RuleTable,
    UnknownRewardCode,
    keep_unresolved,
)
from prizewheel.models import Base, Campaign, CampaignReward
from prizewheel.spin import ActivationGate, SpinPhase
from prizewheel.workflows import (
    build_engine,
    create_spin_session,
    current_date,
    describe_day,
    load_campaign,
    save_campaign,
)
from tests.helpers import ForcedRandom, ManualScheduler

DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "black_friday_2025.json"


class CurrentDateTests(unittest.TestCase):
    def test_utc_evening_is_previous_day_in_sao_paulo(self) -> None:
        now = datetime(2025, 11, 11, 2, 30, tzinfo=timezone.utc)
        self.assertEqual(current_date("America/Sao_Paulo", now), date(2025, 11, 10))
        self.assertEqual(current_date("UTC", now), date(2025, 11, 11))

    def test_naive_instant_is_utc(self) -> None:
        now = datetime(2025, 11, 11, 2, 30)
        self.assertEqual(current_date("America/Sao_Paulo", now), date(2025, 11, 10))

    def test_unknown_timezone(self) -> None:
        with self.assertRaises(ConfigurationError):
            current_date("Atlantis/Capital")


class CampaignPersistenceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )
        self.config = load_campaign_file(DATA_FILE)

    def tearDown(self) -> None:
        self.engine.dispose()

    def test_save_then_load_preserves_order_and_rules(self) -> None:
        with self.Session.begin() as session:
            save_campaign(session, self.config)

        with self.Session() as session:
            loaded = load_campaign(session, "black-friday-2025")

        self.assertEqual(loaded.catalog, self.config.catalog)
        self.assertEqual(dict(loaded.rule_table), dict(self.config.rule_table))
        self.assertEqual(loaded.timezone, "America/Sao_Paulo")

    def test_saving_again_replaces_rows(self) -> None:
        with self.Session.begin() as session:
            first_id = save_campaign(session, self.config).id

        smaller = campaign_from_dict(
            {
                "slug": "black-friday-2025",
                "name": "Reduced",
                "timezone": "America/Sao_Paulo",
                "rewards": [{"code": "ONLY", "label": "Only"}],
                "rules": {"2025-11-10": [{"range": [1, 3], "code": "ONLY"}]},
            }
        )
        with self.Session.begin() as session:
            campaign = save_campaign(session, smaller)
            self.assertEqual(campaign.id, first_id)

        with self.Session() as session:
            self.assertEqual(session.scalar(select(func.count(Campaign.id))), 1)
            self.assertEqual(session.scalar(select(func.count(CampaignReward.id))), 1)
            loaded = load_campaign(session, "black-friday-2025")
        self.assertEqual(loaded.name, "Reduced")
        self.assertEqual(loaded.catalog.codes, ("ONLY",))
        self.assertEqual(list(loaded.rule_table), ["2025-11-10"])

    def test_missing_campaign(self) -> None:
        with self.Session() as session:
            with self.assertRaises(ConfigurationError):
                load_campaign(session, "nope")


class DescribeDayTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = load_campaign_file(DATA_FILE)

    def test_zero_scoped_seladora_is_reported_unreachable(self) -> None:
        summary = describe_day(self.config, "2025-11-10")
        self.assertFalse(summary["fallback"])
        self.assertEqual(summary["max_range"], 49)
        self.assertEqual(summary["odds"]["BLACKENVELOPEG"], "40/49")
        self.assertNotIn("BLACKSELADORA", summary["odds"])
        self.assertEqual(
            summary["unreachable"], [{"range": [0, 0], "code": "BLACKSELADORA"}]
        )
        self.assertEqual(summary["gaps"], [])

    def test_seladora_is_reachable_when_explicitly_ranged(self) -> None:
        summary = describe_day(self.config, date(2025, 11, 27))
        self.assertEqual(summary["odds"]["BLACKSELADORA"], "1/37")
        self.assertEqual(summary["unreachable"], [])

    def test_unconfigured_day_reports_fallback(self) -> None:
        summary = describe_day(self.config, "2025-12-01")
        self.assertTrue(summary["fallback"])
        self.assertEqual(set(summary["odds"].values()), {"1/5"})


class CreateSpinSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = load_campaign_file(DATA_FILE)
        self.scheduler = ManualScheduler()

    def test_session_uses_settings_and_campaign(self) -> None:
        settings = Settings(spin_duration=2.0, min_rotations=5, strict_geometry=True)
        session = create_spin_session(
            self.config,
            settings,
            scheduler=self.scheduler,
            random_source=ForcedRandom(randints=[44]),
            today=lambda: date(2025, 11, 13),
        )
        self.assertTrue(session.spin())
        # 2025-11-13: [44, 44] -> BLACKNECESSAIRE, segment 3 of 5
        self.assertEqual(session.rotation_angle, 360 * 5 - 3 * 72)

        self.scheduler.advance(1.5)
        self.assertIs(session.phase, SpinPhase.SPINNING)
        self.scheduler.advance(0.5)
        self.assertIs(session.phase, SpinPhase.REVEALED)
        self.assertEqual(session.revealed_code, "BLACKNECESSAIRE")

    def test_default_date_provider_uses_campaign_timezone(self) -> None:
        session = create_spin_session(
            self.config,
            Settings(),
            scheduler=self.scheduler,
            random_source=ForcedRandom(randints=[1], randranges=[0]),
        )
        session.spin()
        self.scheduler.advance(3.0)
        expected = current_date("America/Sao_Paulo").isoformat()
        self.assertEqual(session.draw_result.date_key, expected)

    def test_gate_and_recovery_are_forwarded(self) -> None:
        gate = ActivationGate()
        broken = campaign_from_dict(
            {
                "slug": "gappy",
                "timezone": "UTC",
                "rewards": [{"code": "A"}, {"code": "B"}],
                "rules": {"2025-11-10": [{"range": [1, 1], "code": "A"},
                                         {"range": [3, 3], "code": "B"}]},
            }
        )
        session = create_spin_session(
            broken,
            Settings(),
            scheduler=self.scheduler,
            gate=gate,
            random_source=ForcedRandom(randints=[2]),
            recovery=keep_unresolved,
            today=lambda: date(2025, 11, 10),
        )
        self.assertFalse(session.spin())
        gate.signal_ready()
        self.assertTrue(session.spin())
        self.scheduler.advance(3.0)
        self.assertFalse(session.draw_result.is_resolved)

    def test_shared_engine(self) -> None:
        engine = build_engine(self.config)
        first = create_spin_session(
            self.config, Settings(), scheduler=self.scheduler, engine=engine,
            random_source=ForcedRandom(randints=[1]), today=lambda: date(2025, 11, 10),
        )
        second = create_spin_session(
            self.config, Settings(), scheduler=self.scheduler, engine=engine,
            random_source=ForcedRandom(randints=[45]), today=lambda: date(2025, 11, 10),
        )
        first.spin()
        second.spin()
        self.scheduler.advance(3.0)
        self.assertEqual(first.revealed_code, "BLACKENVELOPEG")
        self.assertEqual(second.revealed_code, "BLACKFRETEOFF50")

    def test_default_scheduler_needs_a_running_loop(self) -> None:
        with self.assertRaises(RuntimeError):
            create_spin_session(self.config, Settings())

    def test_strict_geometry_surfaces_unknown_code(self) -> None:
        # Bypass campaign validation to simulate a stale engine.
        stale = DrawEngine(
            self.config.catalog,
            RuleTable.from_mapping({"2025-11-10": [{"range": [1, 1], "code": "OLD"}]}),
        )
        session = create_spin_session(
            self.config,
            Settings(strict_geometry=True),
            scheduler=self.scheduler,
            engine=stale,
            random_source=ForcedRandom(randints=[1]),
            today=lambda: date(2025, 11, 10),
        )
        with self.assertRaises(UnknownRewardCode):
            session.spin()
        self.assertIs(session.phase, SpinPhase.IDLE)


if __name__ == "__main__":
    unittest.main()
