"""
nc_user_admin.ocs

Transport & error-mapping boundary for the remote OCS provisioning API.

Responsibilities:
- Build authenticated requests and classify their outcomes.
- Unwrap the two-level OCS envelope into domain records.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The sync orchestrator depends on this boundary, never on httpx directly.
