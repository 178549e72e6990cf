"""Check the configuration database for schema drift and broken campaigns.

Exit codes: 0 when the schema matches the models and every campaign loads,
1 when drift or an invalid campaign is found, 2 on connection errors.
"""

from __future__ import annotations

import sys

from alembic.autogenerate import api as ag_api
from alembic.runtime.migration import MigrationContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from prizewheel.db.engine import make_engine
from prizewheel.draw.errors import ConfigurationError
from prizewheel.models import Base, Campaign
from prizewheel.workflows import describe_day, load_campaign


def _print_ops(ops, indent: int = 0) -> None:
    prefix = "  " * indent
    for op in ops:
        print(f"{prefix}- {op}")
        sub_ops = getattr(op, "ops", None)
        if sub_ops:
            _print_ops(sub_ops, indent + 1)


def _schema_drift(connection) -> bool:
    context = MigrationContext.configure(
        connection=connection,
        opts={
            "compare_type": True,
            "compare_server_default": True,
            "render_as_batch": connection.dialect.name == "sqlite",
        },
    )
    upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    if upgrade_ops is None or upgrade_ops.is_empty():
        return False
    print("Schema drift detected:")
    _print_ops(upgrade_ops.ops or [])
    return True


def _invalid_campaigns(session: Session) -> int:
    failures = 0
    for slug in session.scalars(select(Campaign.slug).order_by(Campaign.slug)):
        try:
            config = load_campaign(session, slug)
        except ConfigurationError as exc:
            print(f"Campaign {slug!r}: INVALID ({exc})")
            failures += 1
            continue
        print(f"Campaign {slug!r}: OK ({len(config.rule_table)} rule days)")
        for key in config.rule_table:
            unreachable = describe_day(config, key)["unreachable"]
            if unreachable:
                print(f"  {key}: ranges that can never win: {unreachable}")
    return failures


def main() -> int:
    engine = make_engine()
    url_display = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as connection:
            drift = _schema_drift(connection)
            if drift:
                print(f"Config check: FAILED for {url_display}.")
                return 1
            with Session(bind=connection) as session:
                failures = _invalid_campaigns(session)
    except Exception as exc:
        print(f"Config check: ERROR for {url_display}: {exc}", file=sys.stderr)
        return 2
    if failures:
        print(f"Config check: FAILED for {url_display}: {failures} invalid campaign(s).")
        return 1
    print(f"Config check: OK for {url_display}.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
