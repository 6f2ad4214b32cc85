from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from config import settings


_is_sqlite = settings.DATABASE_URL.startswith("sqlite")

engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    echo=False,
)


def set_sqlite_pragma(dbapi_connection, connection_record):
    _ = connection_record
    cursor = dbapi_connection.cursor()
    # stats reads run concurrently on separate pooled connections
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


if _is_sqlite:
    event.listen(engine, "connect", set_sqlite_pragma)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def run_startup_migrations(bind=None) -> None:
    """Apply lightweight schema fixes for existing SQLite databases."""
    bind = bind if bind is not None else engine
    inspector = inspect(bind)

    def _table_columns(table_name: str) -> set[str]:
        try:
            return {col["name"] for col in inspector.get_columns(table_name)}
        except Exception:
            return set()

    profile_columns = _table_columns("user_profiles")
    completion_columns = _table_columns("routine_step_completions")
    if not profile_columns and not completion_columns:
        # Tables may not exist yet on first boot.
        return

    with bind.begin() as conn:
        if profile_columns and "timezone" not in profile_columns:
            conn.execute(text("ALTER TABLE user_profiles ADD COLUMN timezone TEXT DEFAULT 'Europe/London'"))

        if completion_columns:
            conn.execute(text(
                """
                CREATE INDEX IF NOT EXISTS idx_completions_user_date_status
                ON routine_step_completions (user_profile_id, scheduled_date, status)
                """
            ))
