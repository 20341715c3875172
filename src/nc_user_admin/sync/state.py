"""
nc_user_admin.sync.state

Status types for a synchronization cycle.

Responsibilities:
- Enumerate cycle outcomes (Idle -> Loading -> Success | PartialSuccess | Failed).
- Provide an immutable status snapshot for presentation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class SyncOutcome(enum.StrEnum):
    idle = "IDLE"
    loading = "LOADING"
    success = "SUCCESS"
    partial_success = "PARTIAL_SUCCESS"
    failed = "FAILED"

    @property
    def is_displayable(self) -> bool:
        # Partial results still render; only a total failure has nothing new to show.
        return self in (SyncOutcome.success, SyncOutcome.partial_success)


@dataclass(frozen=True, slots=True)
class SyncStatus:
    is_loading: bool
    outcome: SyncOutcome
    error_message: str | None
    success_message: str | None
    skipped_user_ids: tuple[str, ...]
    generation: int
    user_count: int
    group_count: int


class UnknownUserError(LookupError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"Unknown user '{user_id}'")


# --- Module Notes -----------------------------------------------------------
# SyncStatus is a value copy; mutating orchestrator state never changes a snapshot
# already handed to presentation.
