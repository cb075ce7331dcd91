"""
Database engine initialisation for the team directory.
"""

import sys
from typing import Optional

from sqlalchemy import create_engine, text

from calltracker_authz.config import DIRECTORY_DB_ENV, get_env


def init_engine(db_uri: Optional[str] = None):
    """Create a SQLAlchemy engine for the directory and verify the connection."""
    db_uri = db_uri or get_env(DIRECTORY_DB_ENV)
    engine = create_engine(db_uri, echo=False, future=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print("ERROR: could not connect to directory DB:", e, file=sys.stderr)
        sys.exit(1)
    print("[init] Connected to directory DB.")
    return engine
