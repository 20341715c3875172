"""
nc_user_admin.sync

Synchronization orchestrator package.

Responsibilities:
- Reconcile cache, network and user-initiated mutations into one in-memory state.
- Expose pure derived views (filter/search/sort) over that state.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Presentation talks to `sync.orchestrator.DirectorySyncOrchestrator` only, behind the lock gate.
