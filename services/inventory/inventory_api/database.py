"""
Database configuration and session management for the Inventory service.

This module sets up the database connection using SQLAlchemy and provides
a session factory for database operations.
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL, SQL_ECHO

logger = logging.getLogger(__name__)

# Create SQLAlchemy engine
# Create SessionLocal class for database sessions
# Base class for declarative models
engine       = create_engine(DATABASE_URL, echo=SQL_ECHO, pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base         = declarative_base()

logger.info(f"Database engine created for {make_url(DATABASE_URL).render_as_string(hide_password=True)}")

def get_db():
    """
    Dependency function that provides a database session.
    
    Yields:
        Session: SQLAlchemy database session
        
    Usage:
        Use as a FastAPI dependency to inject database sessions into route handlers.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
