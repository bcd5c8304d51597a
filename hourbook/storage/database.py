"""Engine, session and transaction management."""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hourbook.storage.repository import TimesheetRepository
from hourbook.storage.tables import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    In-memory SQLite databases share a single connection so that every
    session sees the same data.

    Args:
        database_url: SQLAlchemy URL
        echo: Echo SQL statements

    Returns:
        Configured Engine
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url, echo=echo, connect_args={"check_same_thread": False}
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class Database:
    """Relational store reached through ``TimesheetRepository``.

    Every mutating service operation runs in one ``transaction()`` so that
    an entry row and its project's counter are committed together or not
    at all.

    Example:
        >>> db = Database("sqlite:///:memory:")
        >>> db.create_all()
        >>> with db.transaction() as repo:
        ...     repo.list_categories()
        []
    """

    def __init__(self, database_url: str, engine: Optional[Engine] = None, echo: bool = False):
        self.database_url = database_url
        self.engine = engine or build_engine(database_url, echo=echo)
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )

    def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(self.engine)
        logger.info("Database schema ready")

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[TimesheetRepository]:
        """Run a unit of work.

        Commits when the block exits normally and rolls back on any
        exception, which is then re-raised unchanged.

        Yields:
            TimesheetRepository bound to the transaction's session
        """
        session = self._session_factory()
        try:
            yield TimesheetRepository(session)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
