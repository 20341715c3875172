"""
nc_user_admin.api

Local presentation API package (FastAPI).

Responsibilities:
- App factory, routers, dependencies.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Layout/navigation live in whatever front-end talks to this API; none of it is here.
