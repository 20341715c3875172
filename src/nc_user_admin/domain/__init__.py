"""
nc_user_admin.domain

Domain records shared by the transport, cache and sync layers.

Responsibilities:
- Define DirectoryUser / QuotaRecord / DirectoryGroup.
"""

from nc_user_admin.domain.models import DirectoryGroup, DirectoryUser, QuotaRecord

__all__ = ["DirectoryGroup", "DirectoryUser", "QuotaRecord"]


# --- Module Notes -----------------------------------------------------------
# These records are also the cache serialization format, so field names are stable.
