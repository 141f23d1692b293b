# db.py
# Role: Database bootstrap for the AutoExpense backend.
#       Defines the SQLAlchemy engine, session factory, and declarative Base.
#       init_db() makes sure the on-disk SQLite directory exists and creates tables.

"""
Database setup for the AutoExpense backend.

- Uses DATABASE_URL from config (SQLite file under <project_root>/data by default).
- Tables are created by init_db() on application startup.
"""

import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import DATABASE_URL

# For SQLite, we need check_same_thread=False for FastAPI (threaded request handling)
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

# Standard session factory used via dependency injection (see app/deps.py:get_db)
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Declarative base class for ORM models
Base = declarative_base()


def init_db() -> None:
    """
    Create the SQLite data folder (if the URL points at a file) and all tables.
    Safe to call repeatedly.
    """
    # Register models on Base.metadata
    import models  # noqa: F401

    if engine.url.get_backend_name() == "sqlite" and engine.url.database not in (None, "", ":memory:"):
        db_dir = os.path.dirname(os.path.abspath(engine.url.database))
        os.makedirs(db_dir, exist_ok=True)

    Base.metadata.create_all(bind=engine)
