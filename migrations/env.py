# migrations/env.py
import os
from alembic import context
from dotenv import load_dotenv
from sqlalchemy import engine_from_config, pool

# (1) carregar .env antes de importar settings
load_dotenv()

from app.db.base import Base  # noqa: E402
from app.db.session import _normalize  # noqa: E402
import app.models  # noqa: E402,F401  registra as tabelas no metadata

config = context.config

# (2) URL: a que o bootstrap já setou > DATABASE_URL > settings
db_url = config.get_main_option("sqlalchemy.url") or os.getenv("DATABASE_URL")
if not db_url or db_url.strip() == "":
    from app.core.config import settings
    db_url = settings.DATABASE_URL
config.set_main_option("sqlalchemy.url", _normalize(db_url))

target_metadata = Base.metadata

def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    connectable = engine_from_config(config.get_section(config.config_ini_section), prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        # batch mode: sqlite não suporta ALTER de constraints
        context.configure(connection=connection, target_metadata=target_metadata, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
