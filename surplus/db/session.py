"""
surplus/db/session.py – Database: engine + sessionmaker owned by one object.

Every store receives a Database at construction; nothing reads the engine
from module state.
"""
import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Engine wrapper. SQLite gets WAL mode + check_same_thread=False."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.engine: Engine = self._build_engine(url, echo)
        self._factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    # ── Public API ─────────────────────────────────────────────────────────────

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Context manager returning a Session; commits, rolls back, closes."""
        session: Session = self._factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        """Connect and create missing tables. Raises if the store is unreachable."""
        Base.metadata.create_all(self.engine)
        logger.info(f"Database ready: {self.engine.url.render_as_string(hide_password=True)}")

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def dispose(self) -> None:
        self.engine.dispose()

    # ── Private ────────────────────────────────────────────────────────────────

    @staticmethod
    def _build_engine(url: str, echo: bool) -> Engine:
        if not url.startswith("sqlite"):
            return create_engine(url, echo=echo, pool_pre_ping=True)

        engine = create_engine(url, connect_args={"check_same_thread": False}, echo=echo)

        @event.listens_for(engine, "connect")
        def set_pragmas(conn, _):
            # WAL lets readers proceed while one writer holds the decrement lock
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.execute("PRAGMA foreign_keys=ON")

        return engine
