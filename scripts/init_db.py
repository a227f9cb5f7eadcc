from __future__ import annotations

import argparse
import logging
from pathlib import Path

from alembic import command
from alembic.autogenerate import api as ag_api
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import inspect

from prizepool.db.engine import make_engine
from prizepool.models import Base

logger = logging.getLogger("prizepool.init_db")

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def upgrade_db(target_revision: str = "head") -> None:
    """Apply Alembic migrations up to the requested revision."""
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    command.upgrade(alembic_cfg, target_revision)


def missing_tables() -> list[str]:
    """Return raffle tables declared by the models but absent from the database."""
    engine = make_engine()
    existing = set(inspect(engine).get_table_names())
    return sorted(set(Base.metadata.tables) - existing)


def schema_drift() -> list:
    """Return the Alembic operations needed to bring the database in line with the models."""
    engine = make_engine()
    with engine.connect() as connection:
        context = MigrationContext.configure(
            connection=connection,
            opts={
                "compare_type": True,
                "render_as_batch": connection.dialect.name == "sqlite",
            },
        )
        upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    if upgrade_ops is None:
        return []
    return list(upgrade_ops.ops or [])


def main() -> int:
    parser = argparse.ArgumentParser(description="Migrate the raffle database.")
    parser.add_argument("--revision", default="head")
    parser.add_argument(
        "--check", action="store_true", help="Only report schema drift, do not migrate"
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")

    if not args.check:
        upgrade_db(args.revision)

    missing = missing_tables()
    if missing:
        logger.error(f"Missing tables: {', '.join(missing)}")
        return 1

    drift = schema_drift()
    if drift:
        logger.error("Schema drift detected:")
        for op in drift:
            logger.error(f"- {op}")
        return 1

    logger.info("Raffle schema is up to date")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
