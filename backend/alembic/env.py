import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine.url import make_url

# backend/alembic/env.py -> parents[1] == backend/, which holds the tenantcrm package
sys.path.append(str(Path(__file__).resolve().parents[1]))

import tenantcrm.db.models  # noqa: F401, E402
from tenantcrm.core.config import settings  # noqa: E402
from tenantcrm.db.base import Base  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    # tenantcrm settings (env / .env) take precedence over alembic.ini
    return settings.DATABASE_URL or config.get_main_option("sqlalchemy.url")


def _context_options(url: str) -> dict:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        # SQLite cannot ALTER most constraints in place
        "render_as_batch": make_url(url).get_backend_name() == "sqlite",
    }


def run_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_context_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = create_engine(url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, **_context_options(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline(_database_url())
else:
    run_online(_database_url())
