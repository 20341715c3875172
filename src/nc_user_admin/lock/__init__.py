"""
nc_user_admin.lock

Session lock package.

Responsibilities:
- Lock/unlock state machine driven by application lifecycle.
- Local authentication challenge boundary (passcode implementation included).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Enforcement happens at the presentation boundary (`api.deps.require_unlocked`).
