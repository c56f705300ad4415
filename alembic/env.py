from logging.config import fileConfig

from alembic import context

from speechcoach.db.base import Base
from speechcoach.db.session import engine

import speechcoach.db.models  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

if context.is_offline_mode():
    raise SystemExit("Offline (--sql) migrations are not supported; run against DATABASE_URL")

# the app's own engine, so migrations hit the same DATABASE_URL (env / .env)
with engine.connect() as connection:
    context.configure(
        connection=connection,
        target_metadata=Base.metadata,
        # SQLite can't ALTER most things in place
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()
