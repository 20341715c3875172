"""
nc_user_admin.observability

Observability package.

Responsibilities:
- Structured logging configuration.
- Request context propagation for consistent log enrichment.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Sync, cache and lock components obtain loggers via `observability.logging.get_logger`.
