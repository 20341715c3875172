"""
nc_user_admin.sync.views

Pure derived views over the in-memory directory state.

Responsibilities:
- Filter users by enabled state and a case-insensitive search term.
- Sort users by identifier, display name, or most recent login.
- Derive group membership by scanning users.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence

from nc_user_admin.domain.models import DirectoryGroup, DirectoryUser


class UserFilter(enum.StrEnum):
    all = "all"
    enabled_only = "enabled"
    disabled_only = "disabled"


class UserSortOrder(enum.StrEnum):
    identifier = "identifier"
    display_name = "display_name"
    last_login = "last_login"


def matches_search(user: DirectoryUser, term: str) -> bool:
    needle = term.strip().casefold()
    if not needle:
        return True
    haystacks = (user.user_id, user.display_name, user.email)
    return any(h is not None and needle in h.casefold() for h in haystacks)


def _last_login_key(user: DirectoryUser) -> tuple[int, float, str]:
    # Most recent first; users who never logged in go last, ordered by id.
    if user.last_login is None:
        return (1, 0.0, user.user_id)
    return (0, -user.last_login.timestamp(), user.user_id)


def filter_users(
    users: Iterable[DirectoryUser],
    *,
    status: UserFilter = UserFilter.all,
    search: str = "",
    order: UserSortOrder = UserSortOrder.identifier,
) -> list[DirectoryUser]:
    result = list(users)

    if status is UserFilter.enabled_only:
        result = [u for u in result if u.enabled]
    elif status is UserFilter.disabled_only:
        result = [u for u in result if not u.enabled]

    if search:
        result = [u for u in result if matches_search(u, search)]

    if order is UserSortOrder.display_name:
        result.sort(key=lambda u: (u.label.casefold(), u.user_id))
    elif order is UserSortOrder.last_login:
        result.sort(key=_last_login_key)
    else:
        result.sort(key=lambda u: u.user_id)
    return result


def filter_groups(groups: Iterable[DirectoryGroup], search: str = "") -> list[DirectoryGroup]:
    needle = search.strip().casefold()
    if not needle:
        return list(groups)
    return [g for g in groups if needle in g.name.casefold()]


def group_members(users: Iterable[DirectoryUser], group_name: str) -> list[DirectoryUser]:
    return [u for u in users if u.in_group(group_name)]


def group_member_counts(
    users: Sequence[DirectoryUser], groups: Iterable[DirectoryGroup]
) -> dict[str, int]:
    counts = {g.name: 0 for g in groups}
    for user in users:
        for name in user.groups:
            if name in counts:
                counts[name] += 1
    return counts


def assignable_groups(
    user: DirectoryUser, groups: Iterable[DirectoryGroup]
) -> list[DirectoryGroup]:
    """Groups the user could still be added to."""

    return [g for g in groups if not user.in_group(g.name)]


# --- Module Notes -----------------------------------------------------------
# Nothing here is memoized; callers pass in a snapshot and get a fresh list back.
