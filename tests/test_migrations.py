from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from speechcoach.db.base import Base
from speechcoach.db.session import engine

ROOT = Path(__file__).resolve().parents[1]


def _config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    return cfg


def test_upgrade_creates_every_model_table():
    cfg = _config()

    command.upgrade(cfg, "head")
    try:
        tables = set(inspect(engine).get_table_names())
        assert set(Base.metadata.tables) <= tables
        assert "alembic_version" in tables
    finally:
        command.downgrade(cfg, "base")

    assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
