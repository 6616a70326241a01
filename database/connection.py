"""
Database connection management for LegalFlow.
Handles SQLAlchemy engine creation, session management, and connection verification.
"""

import os
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import QueuePool, StaticPool

from config import normalize_database_url

logger = logging.getLogger(__name__)

# Get DATABASE_URL from environment
DATABASE_URL = normalize_database_url(os.environ.get('DATABASE_URL'))

# SQLAlchemy Base for model declarations
Base = declarative_base()

# Engine and SessionLocal will be initialized when needed
engine = None
SessionLocal = None


def _engine_options(url):
    """Pool options per backend; SQLite cannot use a sized QueuePool."""
    if url.startswith('sqlite'):
        options = {'connect_args': {'check_same_thread': False}}
        if url in ('sqlite://', 'sqlite:///:memory:'):
            # One shared connection so every session sees the same in-memory db
            options['poolclass'] = StaticPool
        return options

    return {
        'poolclass': QueuePool,
        'pool_size': 5,
        'max_overflow': 10,
        'pool_pre_ping': True,  # Verify connections before using
        'pool_recycle': 300,    # Recycle connections after 5 minutes
    }


def init_engine(url=None):
    """
    (Re)create the engine and session factory for the given URL.
    Called by the app factory with the configured DATABASE_URL.
    """
    global engine, SessionLocal, DATABASE_URL

    url = normalize_database_url(url) or DATABASE_URL
    if not url:
        logger.error("DATABASE_URL environment variable is not set!")
        raise RuntimeError(
            "DATABASE_URL not configured. Cannot connect to database. "
            "Please set the DATABASE_URL environment variable."
        )

    if engine is not None:
        engine.dispose()

    try:
        engine = create_engine(url, echo=False, **_engine_options(url))
    except Exception as e:
        logger.error(f"Failed to create database engine: {e}")
        raise RuntimeError(f"Failed to connect to database: {e}")

    DATABASE_URL = url
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info(f"Database engine created for {engine.url.get_backend_name()}")
    return engine


def get_engine():
    """Get or create the SQLAlchemy engine."""
    if engine is None:
        init_engine()
    return engine


def get_session_factory():
    """Get or create the session factory."""
    if SessionLocal is None:
        init_engine()
    return SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for getting a database session.
    Commits when the block succeeds, rolls back and re-raises otherwise.

    Example:
        with get_db_session() as db:
            items = db.query(Item).all()
    """
    session_factory = get_session_factory()
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection():
    """
    Verify that the database connection is working.
    Returns True if connection is successful, raises exception otherwise.
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise RuntimeError(f"Cannot connect to database: {e}")


def init_db():
    """
    Create all tables. Used for development and tests; production runs
    alembic migrations instead.
    """
    # Import models to ensure they're registered with Base
    from database import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables created/verified")
