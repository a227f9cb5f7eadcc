from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv

# Make the prizepool package importable when alembic runs from a checkout.
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))
load_dotenv(ROOT_DIR / ".env")

from prizepool.db.engine import DEFAULT_SQLITE_URL, make_engine  # noqa: E402
from prizepool.db.utils import is_sqlite_url, resolve_sqlite_url  # noqa: E402
from prizepool.models import Base  # noqa: E402 - import registers every raffle table

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

DATABASE_URL = (
    resolve_sqlite_url(os.environ["DB_URL"], ROOT_DIR)
    if os.getenv("DB_URL")
    else DEFAULT_SQLITE_URL
)
# ConfigParser interpolation treats '%' specially.
config.set_main_option("sqlalchemy.url", DATABASE_URL.replace("%", "%%"))

MIGRATION_OPTIONS = {
    "target_metadata": target_metadata,
    "compare_type": True,
    # SQLite cannot ALTER constraints in place; batch mode recreates the table.
    "render_as_batch": is_sqlite_url(DATABASE_URL),
}


def run_migrations_offline() -> None:
    """Emit the raffle schema as SQL without connecting."""

    context.configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **MIGRATION_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply the raffle migrations against the configured database."""

    engine = make_engine(database_url=DATABASE_URL)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **MIGRATION_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
