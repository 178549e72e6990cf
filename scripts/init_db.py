from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, select

from prizewheel.db.engine import get_sessionmaker, make_engine
from prizewheel.models import Campaign

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the requested revision."""
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def print_summary() -> None:
    """Print the tables and stored campaign slugs of the configured database."""
    engine = make_engine()
    print("Current tables:", ", ".join(sorted(inspect(engine).get_table_names())))
    with get_sessionmaker(engine)() as session:
        slugs = list(session.scalars(select(Campaign.slug).order_by(Campaign.slug)))
    print("Campaigns:", ", ".join(slugs) if slugs else "(none)")


def main() -> None:
    """Apply migrations (default to head) and report the resulting state."""
    upgrade_db()
    print_summary()


if __name__ == "__main__":
    main()
