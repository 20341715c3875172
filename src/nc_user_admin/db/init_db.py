"""
nc_user_admin.db.init_db

DB initialization helpers.

Responsibilities:
- Create the preferences table if it does not exist.
"""

from __future__ import annotations

from sqlalchemy import Engine

from nc_user_admin.db.models import Base


def init_db(engine: Engine) -> None:
    with engine.begin() as conn:
        Base.metadata.create_all(conn)


# --- Module Notes -----------------------------------------------------------
# The schema is a single key/value table, so create_all is the whole migration story.
