"""
Role-Based Access Control – the policy evaluator.

Every decision is a pure function of the UserContext, the capability and (for
delegation checks) a TeamMembershipIndex. Missing or malformed inputs answer
False or the least privileged result; nothing here raises for them.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional

from calltracker_authz.models import AccessScope, UserContext
from calltracker_authz.roles import (
    ADMIN_ROLES,
    AGENT,
    MANAGER,
    SUPER_ADMIN,
    VIEWER,
    VIEW_ORG_ANALYTICS,
    VIEW_TEAM_ANALYTICS,
    is_default_granted,
)
from calltracker_authz.teams import TeamMembershipIndex


class DashboardKind(str, Enum):
    ORG_ADMIN = "org_admin"
    MANAGER = "manager"
    AGENT = "agent"
    VIEWER = "viewer"


# Resolution order for users carrying several role signals.
DASHBOARD_PRECEDENCE = (
    (DashboardKind.ORG_ADMIN, ADMIN_ROLES),
    (DashboardKind.MANAGER, frozenset({MANAGER})),
    (DashboardKind.AGENT, frozenset({AGENT})),
    (DashboardKind.VIEWER, frozenset({VIEWER})),
)

# Roles allowed to open each dashboard.
DASHBOARD_ACCESS: Dict[DashboardKind, FrozenSet[str]] = {
    DashboardKind.ORG_ADMIN: ADMIN_ROLES,
    DashboardKind.MANAGER: ADMIN_ROLES | {MANAGER},
    DashboardKind.AGENT: ADMIN_ROLES | {MANAGER, AGENT},
    DashboardKind.VIEWER: frozenset({VIEWER}),
}

# View model rendered for each dashboard kind.
DASHBOARD_VIEWS: Dict[DashboardKind, str] = {
    DashboardKind.ORG_ADMIN: "OrgAdminDashboard",
    DashboardKind.MANAGER: "ManagerDashboard",
    DashboardKind.AGENT: "EnhancedDashboard",
    DashboardKind.VIEWER: "ViewerDashboard",
}


# ── Primitive ────────────────────────────────────────────────────────

def can(user: Optional[UserContext], capability: str, grants=None) -> bool:
    """Role default grant OR explicit permission. No user means no access."""
    if user is None or not isinstance(capability, str) or not capability:
        return False
    return (is_default_granted(user.role, capability, grants)
            or capability in user.explicit_permissions)


def can_any(user: Optional[UserContext], capabilities: Iterable[str], grants=None) -> bool:
    return any(can(user, c, grants) for c in capabilities)


def can_all(user: Optional[UserContext], capabilities: Iterable[str], grants=None) -> bool:
    """True only if every capability is held; an empty list is denied."""
    capabilities = list(capabilities)
    return bool(capabilities) and all(can(user, c, grants) for c in capabilities)


def is_admin(user: Optional[UserContext]) -> bool:
    return user is not None and user.role in ADMIN_ROLES


def is_manager(user: Optional[UserContext]) -> bool:
    return user is not None and user.role == MANAGER


# ── Team delegation ──────────────────────────────────────────────────

def can_manage_user(manager: Optional[UserContext], target_user_id,
                    team_index: Optional[TeamMembershipIndex]) -> bool:
    """
    Admins manage everyone. A manager manages a user when at least one team
    the manager runs has that user as a member.
    """
    if manager is None or target_user_id is None:
        return False
    if is_admin(manager):
        return True
    if not is_manager(manager) or team_index is None:
        return False
    return any(
        team_index.is_member(team_id, target_user_id)
        for team_id in team_index.teams_managed_by(manager.id)
    )


def can_assign_contact_to_user(actor: Optional[UserContext], target_user_id,
                               team_index: Optional[TeamMembershipIndex]) -> bool:
    return is_admin(actor) or (
        is_manager(actor) and can_manage_user(actor, target_user_id, team_index)
    )


def can_access_team_data(actor: Optional[UserContext], team_id,
                         team_index: Optional[TeamMembershipIndex]) -> bool:
    if actor is None:
        return False
    if is_admin(actor):
        return True
    if team_index is None:
        return False
    return (team_index.is_manager_of(team_id, actor.id)
            or team_index.is_member(team_id, actor.id))


def can_manage_team(actor: Optional[UserContext], team_id,
                    team_index: Optional[TeamMembershipIndex]) -> bool:
    """Admins, or a manager-role user who manages *team_id*."""
    if is_admin(actor):
        return True
    return (is_manager(actor) and team_index is not None
            and team_index.is_manager_of(team_id, actor.id))


def can_access_organization(user: Optional[UserContext], organization_id) -> bool:
    if user is None or organization_id is None:
        return False
    if user.role == SUPER_ADMIN:
        return True
    return user.organization_id is not None and user.organization_id == str(organization_id)


# ── Dashboards ───────────────────────────────────────────────────────

def primary_dashboard_for(user: Optional[UserContext]) -> DashboardKind:
    """
    Pick the dashboard for the most privileged role signal the user carries
    (their role plus any legacy role flags). Falls back to the agent view.
    """
    if user is None:
        return DashboardKind.AGENT
    signals = {user.role} | set(user.role_flags)
    for kind, roles in DASHBOARD_PRECEDENCE:
        if signals & roles:
            return kind
    return DashboardKind.AGENT


def dashboard_view_for(user: Optional[UserContext]) -> str:
    return DASHBOARD_VIEWS[primary_dashboard_for(user)]


def can_access_dashboard(user: Optional[UserContext], kind) -> bool:
    if user is None:
        return False
    try:
        kind = DashboardKind(kind)
    except ValueError:
        return False
    return user.role in DASHBOARD_ACCESS[kind]


def analytics_scope_for(user: Optional[UserContext], grants=None) -> str:
    """Widest analytics view the user may open: organization, team or individual."""
    if can(user, VIEW_ORG_ANALYTICS, grants):
        return "organization"
    if can(user, VIEW_TEAM_ANALYTICS, grants):
        return "team"
    return "individual"


# ── Data scope ───────────────────────────────────────────────────────

def access_scope(user: Optional[UserContext],
                 team_index: Optional[TeamMembershipIndex] = None) -> AccessScope:
    """Describe which records *user* may list."""
    if user is None:
        return AccessScope(user_id=None, organization_id=None)

    if is_admin(user):
        return AccessScope(user_id=user.id, organization_id=user.organization_id,
                           can_view_all=True)

    if is_manager(user):
        team_ids = set(user.managed_team_ids)
        if team_index is not None:
            team_ids |= team_index.teams_managed_by(user.id)
        return AccessScope(user_id=user.id, organization_id=user.organization_id,
                           can_view_team=True, team_ids=frozenset(team_ids))

    return AccessScope(user_id=user.id, organization_id=user.organization_id)


def in_scope(scope: AccessScope, organization_id, assigned_to=None,
             created_by=None, team_id=None) -> bool:
    """
    True when a record with the given ownership fields falls inside *scope*.

    Records outside the scope's organization are never visible. Within it,
    view-all scopes see everything, team scopes see their teams' records plus
    their own, and everyone else sees only records assigned to or created by
    them.
    """
    if scope is None or scope.organization_id is None or organization_id is None:
        return False
    if scope.organization_id != str(organization_id):
        return False
    if scope.can_view_all:
        return True

    owns = scope.can_view_own and scope.user_id is not None and scope.user_id in {
        str(v) for v in (assigned_to, created_by) if v is not None
    }
    if owns:
        return True
    if scope.can_view_team and team_id is not None:
        return str(team_id) in scope.team_ids
    return False
