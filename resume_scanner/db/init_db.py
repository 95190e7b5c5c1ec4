import logging

from sqlalchemy.engine import Engine

from resume_scanner.db.base import Base
import resume_scanner.db.models  # noqa: F401  # register tables on Base.metadata

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")
