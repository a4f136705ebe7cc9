"""
db.py
=====
Handles database connection and store/session management for the portal.
"""

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from . import config
from .store import Store


def make_engine(database_url: str):
    """
    Build an engine for `database_url`.
    For SQLite files the parent directory is created and the thread check
    disabled, since FastAPI serves sync handlers from a thread pool.
    """
    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        db_dir = os.path.dirname(url.database or "")
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)


engine = make_engine(config.DATABASE_URL)

# Create a configured session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_store():
    """
    Dependency injection generator.
    Yields a Store bound to a fresh session, closes when done.
    """
    store = Store(SessionLocal())
    try:
        yield store
    finally:
        store.close()


def init_db(Base, bind=None):
    """
    Initializes the database — creates tables if missing.
    Called once on FastAPI startup.
    """
    Base.metadata.create_all(bind=bind or engine)
