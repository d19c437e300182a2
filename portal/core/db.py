"""
SQLAlchemy engine, session, and base. DB path from config or default.
"""
import logging
from pathlib import Path
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

logger = logging.getLogger(__name__)

Base = declarative_base()


def _default_db_url() -> str:
    base = Path.home() / ".student_portal"
    base.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{base / 'portal.db'}"


class Database:
    """
    Owns the engine and session factory. Built once by the application and
    passed to the services that persist data; close() disposes the engine.
    config_data: app config dict; used for database.path if db_url not given.
    db_url: optional SQLAlchemy URL override.
    """

    def __init__(self, config_data: Optional[dict] = None, db_url: Optional[str] = None):
        if db_url is None and config_data:
            path = (config_data.get("database") or {}).get("path")
            if path:
                path = Path(path).expanduser().resolve()
                path.parent.mkdir(parents=True, exist_ok=True)
                db_url = f"sqlite:///{path}"
        if not db_url:
            db_url = _default_db_url()

        self.engine = create_engine(db_url, echo=False, future=True)

        # Import all model modules so tables are registered with Base
        from portal.core import models as _core_models  # noqa: F401
        from portal.plugins.chat import models as _chat_models  # noqa: F401
        from portal.plugins.events import models as _events_models  # noqa: F401
        from portal.plugins.rewards import models as _rewards_models  # noqa: F401
        from portal.plugins.tools import models as _tools_models  # noqa: F401

        Base.metadata.create_all(self.engine)
        self._session_factory = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        logger.info(f"Database initialized: {db_url.split('?')[0]}")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager for a single DB session. Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database closed")
