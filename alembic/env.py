from __future__ import annotations

import os
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Ensure `cloudstore` can be imported when running Alembic without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


def _get_db_url() -> str:
    from cloudstore.infrastructure.stores.sqlalchemy_db import DEFAULT_DB_URL

    return os.getenv("CLOUDSTORE_DB_URL") or config.get_main_option("sqlalchemy.url") or DEFAULT_DB_URL


def get_target_metadata():
    from cloudstore.infrastructure.stores.models import Base  # noqa

    return Base.metadata


target_metadata = get_target_metadata()


def run_migrations_offline() -> None:
    context.configure(
        url=_get_db_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    from cloudstore.infrastructure.stores.sqlalchemy_db import _ensure_sqlite_parent_dir

    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = _get_db_url()
    _ensure_sqlite_parent_dir(configuration["sqlalchemy.url"])

    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
