"""
nc_user_admin.cache

Local read cache for the user and group collections.

Responsibilities:
- Time-boxed, best-effort persistence so presentation can render on cold start.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Cache failures never propagate; the network is always the source of truth.
