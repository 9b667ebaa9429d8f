"""Database configuration and session management"""

from datetime import datetime, timezone
from typing import Generator, Optional
import logging

from sqlalchemy import create_engine, text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.config import settings

logger = logging.getLogger(__name__)

# Create base class for models
Base = declarative_base()


def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalize to the naive UTC datetimes stored in the database"""
    if dt is not None and dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


class Database:
    """
    Storage handle owning one engine and one session factory.

    The engine is created on first use so that importing the application
    never opens a connection or loads a driver.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def _create_engine(self) -> Engine:
        if self.url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                # Single shared connection so every session sees the same in-memory database
                kwargs["poolclass"] = StaticPool
            return create_engine(self.url, echo=self.echo, **kwargs)

        return create_engine(
            self.url,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_timeout=30,
            pool_recycle=3600,
            pool_pre_ping=True,
            echo=self.echo,
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self._session_factory

    def session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def init(self, mode: Optional[str] = None) -> None:
        """
        Initialize database according to configured strategy.

        DB_INIT_MODE:
          - migrate: require alembic_version table (migration-first discipline)
          - create_all: create missing tables from model metadata
          - off: skip initialization check
        """
        mode = (mode or settings.DB_INIT_MODE).lower().strip()
        if mode == "off":
            logger.info("DB initialization check skipped (DB_INIT_MODE=off)")
            return

        if mode == "create_all":
            self.create_all()
            logger.warning("Using create_all database initialization (recommended only for local development).")
            return

        if mode == "migrate":
            with self.engine.connect() as conn:
                if self.engine.dialect.name == "postgresql":
                    version_table_exists = conn.execute(
                        text("SELECT to_regclass('public.alembic_version')")
                    ).scalar()
                    exists = bool(version_table_exists)
                else:
                    exists = "alembic_version" in inspect(conn).get_table_names()
                if settings.DB_REQUIRE_HEAD and not exists:
                    raise RuntimeError(
                        "Migration table missing. Run Alembic migrations before starting the API."
                    )
            logger.info("Migration metadata detected.")
            return

        raise RuntimeError(f"Unknown DB_INIT_MODE: {mode}")

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        """Release pooled connections; the handle can be reused afterwards"""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


database = Database(settings.get_database_url(), echo=settings.DEBUG)

# Import models after Base is defined so metadata is populated.
from app import models  # noqa: E402,F401


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for getting database session

    Yields:
        Session: Database session
    """
    db = database.session()
    try:
        yield db
    finally:
        db.close()
