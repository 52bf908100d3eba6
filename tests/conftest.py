import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import reload_settings  # noqa: E402
import db_engine  # noqa: E402


@pytest.fixture()
def db(tmp_path, monkeypatch):
    """Point the application at a fresh SQLite file with all tables created."""
    db_file = tmp_path / "tickerbook-test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("DEFAULT_CURRENCY", "GBP")
    monkeypatch.setenv("RECENT_TRANSACTIONS_LIMIT", "5")
    reload_settings()
    db_engine.dispose_engine()
    db_engine.init_db()
    yield db_file
    db_engine.dispose_engine()
    monkeypatch.delenv("DATABASE_URL")
    reload_settings()
