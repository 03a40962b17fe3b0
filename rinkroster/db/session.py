# rinkroster/db/session.py
import logging
from typing import Iterator

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from rinkroster.db.engine import SessionLocal, engine

logger = logging.getLogger(__name__)


def get_db() -> Iterator[Session]:
    """One session (and transaction) per request: commit on success, roll back on any error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        try:
            db.close()
        except OperationalError:
            # underlying socket already dead; dispose pool to force fresh conns next time
            logger.warning("session close failed, disposing connection pool")
            engine.dispose()
