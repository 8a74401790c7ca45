# backoffice/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from backoffice.utils.retry import db_retry
from backoffice.utils.settings import DATABASE_URL, DB_LOCK_TIMEOUT_MS
from backoffice.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if url.startswith("postgresql"):
        # a unit of work stuck on a row lock fails instead of waiting forever
        return {
            "options": f"-c lock_timeout={DB_LOCK_TIMEOUT_MS} -c statement_timeout={DB_LOCK_TIMEOUT_MS * 2}"
        }
    return {}


engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@db_retry()
def init_db(bind=None):
    # models must be imported so they register on Base.metadata
    import backoffice.data.models  # noqa: F401

    target = bind or engine
    logger.info(f"Creating tables: {sorted(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=target)
