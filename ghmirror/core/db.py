# ghmirror/core/db.py
import logging

from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base
from ghmirror.core.config import settings

logger = logging.getLogger(__name__)

# SQLAlchemy Base class (for our models)
Base = declarative_base()

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> bool:
    """Create the mirror schema if the store has no tables yet.

    Returns True when the schema was created.
    """
    # models must be registered on Base.metadata before create_all
    import ghmirror.models  # noqa: F401

    bind = bind if bind is not None else engine
    if inspect(bind).get_table_names():
        return False

    logger.info("Database empty, creating schema")
    Base.metadata.create_all(bind=bind)
    return True
