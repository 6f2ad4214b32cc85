from __future__ import annotations

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine, event, inspect, text


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import Settings  # noqa: E402
from db.database import Base, run_startup_migrations  # noqa: E402
import db.models  # noqa: E402,F401


def test_production_security_gate_rejects_missing_api_key():
    settings = Settings(ENVIRONMENT="production", API_KEY="")
    with pytest.raises(RuntimeError):
        settings.validate_security_configuration()


def test_production_security_gate_rejects_short_api_key():
    settings = Settings(ENVIRONMENT="staging", API_KEY="short")
    with pytest.raises(RuntimeError):
        settings.validate_security_configuration()


def test_production_security_gate_accepts_strong_api_key():
    settings = Settings(ENVIRONMENT="production", API_KEY="k" * 40)
    settings.validate_security_configuration()


def test_development_allows_unset_api_key():
    settings = Settings(ENVIRONMENT="development", API_KEY="")
    settings.validate_security_configuration()
    assert settings.is_development is True
    assert settings.DEFAULT_TIMEZONE == "Europe/London"


def test_startup_migration_adds_timezone_to_legacy_profiles(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.db'}")
    with engine.begin() as conn:
        conn.execute(text(
            """
            CREATE TABLE user_profiles (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                first_name TEXT NOT NULL,
                last_name TEXT NOT NULL
            )
            """
        ))
        conn.execute(text(
            "INSERT INTO user_profiles (id, user_id, first_name, last_name) VALUES ('p1', 'u1', 'A', 'B')"
        ))

    run_startup_migrations(bind=engine)

    columns = {col["name"] for col in inspect(engine).get_columns("user_profiles")}
    assert "timezone" in columns
    with engine.connect() as conn:
        tz = conn.execute(text("SELECT timezone FROM user_profiles WHERE id = 'p1'")).scalar()
    assert tz == "Europe/London"
    engine.dispose()


def test_startup_migration_is_noop_on_empty_database(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    run_startup_migrations(bind=engine)
    assert inspect(engine).get_table_names() == []
    engine.dispose()


def test_startup_migration_leaves_completion_rows_untouched_on_every_boot(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'current.db'}")
    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        conn.execute(text(
            "INSERT INTO users (id, email) VALUES ('u1', 'u1@test.com')"
        ))
        conn.execute(text(
            "INSERT INTO user_profiles (id, user_id, first_name, last_name, timezone) "
            "VALUES ('p1', 'u1', 'A', 'B', 'Asia/Tokyo')"
        ))
        conn.execute(text(
            """
            INSERT INTO routine_step_completions
                (id, routine_product_id, user_profile_id, scheduled_date, scheduled_time_of_day,
                 status, updated_at)
            VALUES
                ('c1', 'prod-1', 'p1', '2025-11-07', 'morning', 'on-time', '2025-11-07 08:00:00'),
                ('c2', 'prod-2', 'p1', '2025-11-07', 'evening', 'pending', '2025-11-07 08:00:00')
            """
        ))
    with engine.connect() as conn:
        before = conn.execute(text("SELECT * FROM routine_step_completions ORDER BY id")).all()

    statements: list[str] = []

    def _capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", _capture)
    run_startup_migrations(bind=engine)
    run_startup_migrations(bind=engine)
    event.remove(engine, "before_cursor_execute", _capture)

    with engine.connect() as conn:
        after = conn.execute(text("SELECT * FROM routine_step_completions ORDER BY id")).all()
        tz = conn.execute(text("SELECT timezone FROM user_profiles WHERE id = 'p1'")).scalar()
    indexes = {ix["name"] for ix in inspect(engine).get_indexes("routine_step_completions")}
    engine.dispose()

    assert after == before
    assert tz == "Asia/Tokyo"
    assert "idx_completions_user_date_status" in indexes
    assert not any(s.lstrip().upper().startswith(("UPDATE", "ALTER")) for s in statements)
