"""SQLite engine construction for the native store."""

import logging
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool

from truckore.core.config import Settings

logger = logging.getLogger(__name__)


def create_native_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the embedded SQLite database.

    The parent directory of a file database is created if missing.
    """
    url = make_url(settings.DATABASE_URL)
    if not url.database or url.database == ":memory:":
        # One shared connection so worker threads see the same in-memory database.
        return create_engine(
            url,
            echo=settings.DEBUG,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    db_dir = Path(url.database).parent
    if str(db_dir) not in ("", "."):
        db_dir.mkdir(parents=True, exist_ok=True)
    logger.debug("Creating native engine for %s", url.render_as_string(hide_password=True))
    return create_engine(url, echo=settings.DEBUG)

