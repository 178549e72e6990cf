"""Seed the development database with the bundled campaign definitions."""

import sys
from pathlib import Path

from sqlalchemy.orm import sessionmaker
from prizewheel.config import load_campaign_file
from prizewheel.db.engine import make_engine
from prizewheel.models import Base
from prizewheel.workflows import describe_day, save_campaign

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def main(paths: list[str]) -> None:
    """Load each campaign file and upsert it into the configured database."""
    engine = make_engine()

    # Drop and recreate all tables so the seed always starts from a clean schema.
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)

    files = [Path(p) for p in paths] or sorted(DATA_DIR.glob("*.json"))
    with Session.begin() as session:
        for path in files:
            config = load_campaign_file(path)
            campaign = save_campaign(session, config)
            print(
                f"Seeded campaign {campaign.slug!r}: {len(campaign.rewards)} rewards, "
                f"{len(config.rule_table)} rule days"
            )
            for key in config.rule_table:
                summary = describe_day(config, key)
                if summary["unreachable"] or summary["gaps"]:
                    print(
                        f"  {key}: unreachable={summary['unreachable']} "
                        f"gaps={summary['gaps']}"
                    )


if __name__ == "__main__":
    main(sys.argv[1:])
