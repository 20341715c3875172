"""
nc_user_admin.api.routers

Router package.

Responsibilities:
- Group health, session, profile and directory routers.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers stay thin; state changes go through the orchestrator / services.
