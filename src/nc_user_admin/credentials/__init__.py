"""
nc_user_admin.credentials

Secure credential store boundary.

Responsibilities:
- Define the narrow store interface consumed by the client and profile service.
- Provide the platform-keychain implementation.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Only the password goes through this boundary; non-secret settings use the preferences DB.
