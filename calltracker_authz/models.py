"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from calltracker_authz.roles import ROLES


class InvalidContext(ValueError):
    """Raised when a principal cannot be represented (unknown role)."""


@dataclass(frozen=True)
class UserContext:
    """Snapshot of the authenticated principal being evaluated."""
    id: str
    role: str                                   # one of roles.ROLES
    organization_id: Optional[str]
    explicit_permissions: FrozenSet[str] = frozenset()
    team_ids: FrozenSet[str] = frozenset()           # member of
    managed_team_ids: FrozenSet[str] = frozenset()   # manager of
    role_flags: FrozenSet[str] = frozenset()         # legacy role markers
    display_name: str = ""


@dataclass(frozen=True)
class Team:
    """A team as supplied by the team directory."""
    id: str
    organization_id: Optional[str]
    member_user_ids: FrozenSet[str] = frozenset()
    manager_user_ids: FrozenSet[str] = frozenset()
    name: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class AccessScope:
    """Which records a user may list: everything, their teams, or their own."""
    user_id: Optional[str]
    organization_id: Optional[str]
    can_view_all: bool = False
    can_view_team: bool = False
    can_view_own: bool = True
    team_ids: FrozenSet[str] = field(default_factory=frozenset)


def _normalize_role(raw) -> str:
    return str(raw).strip().lower() if raw is not None else ""


def _frozen(values: Optional[Iterable]) -> FrozenSet[str]:
    if not values:
        return frozenset()
    return frozenset(str(v) for v in values if v is not None and str(v) != "")


def build_user_context(
    user_id,
    role,
    organization_id=None,
    explicit_permissions: Optional[Iterable[str]] = None,
    team_ids: Optional[Iterable[str]] = None,
    managed_team_ids: Optional[Iterable[str]] = None,
    role_flags: Optional[Iterable[str]] = None,
    display_name: str = "",
) -> UserContext:
    """
    Validate raw identity data and return an immutable UserContext.

    Raises InvalidContext when the role (or any role flag) is not one of
    the five known roles. Callers should treat that as "no session".
    """
    normalized = _normalize_role(role)
    if normalized not in ROLES:
        raise InvalidContext(f"Unsupported role '{role}'.")

    flags = frozenset(_normalize_role(f) for f in (role_flags or ()))
    unknown = flags - set(ROLES)
    if unknown:
        raise InvalidContext(f"Unsupported role flag(s): {', '.join(sorted(unknown))}.")

    return UserContext(
        id=str(user_id) if user_id is not None else "",
        role=normalized,
        organization_id=str(organization_id) if organization_id is not None else None,
        explicit_permissions=_frozen(explicit_permissions),
        team_ids=_frozen(team_ids),
        managed_team_ids=_frozen(managed_team_ids),
        role_flags=flags,
        display_name=display_name or "",
    )


def build_team(team_id, organization_id=None, member_user_ids=None,
               manager_user_ids=None, name: str = "", is_active: bool = True) -> Team:
    """Build a Team with ids coerced to strings."""
    return Team(
        id=str(team_id),
        organization_id=str(organization_id) if organization_id is not None else None,
        member_user_ids=_frozen(member_user_ids),
        manager_user_ids=_frozen(manager_user_ids),
        name=name or "",
        is_active=bool(is_active),
    )
