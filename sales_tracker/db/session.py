from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, scoped_session, declarative_base
from contextlib import contextmanager
import logging

from sales_tracker.config.settings import settings

# Set up logging
logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

# SQLite needs cross-thread access for the API worker threads
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        echo=settings.SQL_ECHO,
        connect_args={"check_same_thread": False}
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=settings.SQL_ECHO,
        pool_pre_ping=True,  # Verify connections before usage
        pool_recycle=3600,   # Recycle connections after 1 hour
        pool_size=10,
        max_overflow=20
    )

# Create a thread-local session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
ScopedSession = scoped_session(SessionLocal)

# Base class for models
Base = declarative_base()

@contextmanager
def get_db_session():
    """Provide a transactional scope around a series of operations."""
    session = ScopedSession()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database transaction error: {str(e)}")
        raise
    finally:
        session.close()
        ScopedSession.remove()

def init_db():
    """Create all tables known to the ORM metadata."""
    # Register models on the metadata before creating tables
    from sales_tracker.models import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database initialized at {engine.url.render_as_string(hide_password=True)}")

def check_database_connection() -> bool:
    """
    Check if database connection works

    Returns:
        bool: True if connection is working
    """
    try:
        with get_db_session() as session:
            session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {str(e)}")
        return False
