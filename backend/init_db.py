#!/usr/bin/env python3
# backend/init_db.py
"""
Database initialization script.

Creates the trades and prices tables on the configured DATABASE_URL.
Run from the repository root or from backend/:
    python backend/init_db.py
"""
import logging
import sys
from pathlib import Path

# Make 'portfolio_tracker' importable without installing the project
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

from portfolio_tracker.database import engine
from portfolio_tracker.models import Base
from portfolio_tracker.utils import setup_logging

logger = logging.getLogger("init_db")


def init_db() -> None:
    """Create all tables defined in models (existing tables are left alone)."""
    logger.info(f"Creating database tables on {engine.url.render_as_string(hide_password=True)}")
    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    setup_logging()
    init_db()
