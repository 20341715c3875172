"""
nc_user_admin.services

Service layer package.

Responsibilities:
- Own the single active server/credential profile.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services coordinate stores; they never talk HTTP themselves.
