import logging
import time
from threading import Lock

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend.core import config

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(target: Engine) -> None:
    # SQLite ignores ON DELETE CASCADE unless the pragma is set per connection.
    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def install_query_logging(target: Engine) -> None:
    @event.listens_for(target, "before_cursor_execute")
    def _start_timer(conn, _cursor, _statement, _parameters, _context, _executemany):
        conn.info.setdefault("query_start_time", []).append(time.perf_counter())

    @event.listens_for(target, "after_cursor_execute")
    def _log_duration(conn, cursor, statement, _parameters, _context, _executemany):
        duration_ms = (time.perf_counter() - conn.info["query_start_time"].pop()) * 1000
        logger.debug(
            "Executed query %s",
            {"text": " ".join(statement.split()), "duration_ms": round(duration_ms, 2), "rows": cursor.rowcount},
        )


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        target = create_engine(url, echo=config.SQL_ECHO, connect_args={"check_same_thread": False})
        enable_sqlite_foreign_keys(target)
    else:
        target = create_engine(
            url,
            echo=config.SQL_ECHO,
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_MAX_OVERFLOW,
            pool_timeout=config.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )
    install_query_logging(target)
    return target


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_schema() -> None:
    global _schema_checked

    if _schema_checked:
        return

    with _schema_lock:
        if _schema_checked:
            return

        from backend.models import assignment, course, user  # noqa: F401

        Base.metadata.create_all(bind=engine)
        _schema_checked = True


def check_database_connection(db: Session) -> None:
    db.execute(text("SELECT 1"))
