"""Alembic environment for the ``quiz_leads`` schema.

Migrations run online only, against the database named by ``DATABASE_URL``
or the ``PG_*`` variables; the placeholder URL in alembic.ini is ignored.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from compass_db.config import get_sync_url
from compass_db.models.base import Base
from compass_db.models.lead import LeadRecord  # noqa: F401  registers quiz_leads

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)

if context.is_offline_mode():
    raise RuntimeError("Offline (--sql) migrations are not supported for quiz_leads")

connectable = create_engine(get_sync_url(), poolclass=pool.NullPool)
with connectable.connect() as connection:
    context.configure(
        connection=connection,
        target_metadata=Base.metadata,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()
