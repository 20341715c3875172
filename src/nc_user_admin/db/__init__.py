"""
nc_user_admin.db

Persistence layer for non-secret settings (SQLAlchemy).

Responsibilities:
- ORM base + models.
- Engine/session factory helpers.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Secrets never go through this package; see `nc_user_admin.credentials`.
