"""
Roles, capabilities and the default grant table.

Grants are listed per role with no inheritance between roles, so adding a
capability is a data change in this module only.
"""

from typing import Dict, FrozenSet, Optional

from calltracker_authz.config import DEFAULT_ALLOW_READ

# ── Roles ────────────────────────────────────────────────────────────
SUPER_ADMIN = "super_admin"
ORG_ADMIN = "org_admin"
MANAGER = "manager"
AGENT = "agent"
VIEWER = "viewer"

ROLES = (SUPER_ADMIN, ORG_ADMIN, MANAGER, AGENT, VIEWER)
ADMIN_ROLES = frozenset({SUPER_ADMIN, ORG_ADMIN})

# ── Capabilities: organization ───────────────────────────────────────
MANAGE_USERS = "manage_users"
VIEW_USERS = "view_users"
INVITE_USERS = "invite_users"
DELETE_USERS = "delete_users"
MANAGE_TEAMS = "manage_teams"
VIEW_ORG_ANALYTICS = "view_org_analytics"
MANAGE_ORG_SETTINGS = "manage_org_settings"
MANAGE_ORGANIZATIONS = "manage_organizations"

# ── Capabilities: team ───────────────────────────────────────────────
MANAGE_TEAM_MEMBERS = "manage_team_members"
VIEW_TEAM_ANALYTICS = "view_team_analytics"
ASSIGN_LEADS = "assign_leads"
VIEW_TEAM_CALLS = "view_team_calls"

# ── Capabilities: contacts / leads ───────────────────────────────────
CREATE_CONTACTS = "create_contacts"
EDIT_CONTACTS = "edit_contacts"
DELETE_CONTACTS = "delete_contacts"
VIEW_CONTACTS = "view_contacts"
EXPORT_CONTACTS = "export_contacts"

# ── Capabilities: calls ──────────────────────────────────────────────
VIEW_CALLS = "view_calls"
RECORD_CALLS = "record_calls"
DELETE_CALLS = "delete_calls"
EXPORT_CALLS = "export_calls"

# ── Capabilities: tickets ────────────────────────────────────────────
CREATE_TICKETS = "create_tickets"
EDIT_TICKETS = "edit_tickets"
DELETE_TICKETS = "delete_tickets"
VIEW_TICKETS = "view_tickets"
ASSIGN_TICKETS = "assign_tickets"

# ── Capabilities: analytics ──────────────────────────────────────────
VIEW_ANALYTICS = "view_analytics"
EXPORT_REPORTS = "export_reports"
VIEW_INDIVIDUAL_PERFORMANCE = "view_individual_performance"

ALL_CAPABILITIES = (
    MANAGE_USERS, VIEW_USERS, INVITE_USERS, DELETE_USERS, MANAGE_TEAMS,
    VIEW_ORG_ANALYTICS, MANAGE_ORG_SETTINGS, MANAGE_ORGANIZATIONS,
    MANAGE_TEAM_MEMBERS, VIEW_TEAM_ANALYTICS, ASSIGN_LEADS, VIEW_TEAM_CALLS,
    CREATE_CONTACTS, EDIT_CONTACTS, DELETE_CONTACTS, VIEW_CONTACTS, EXPORT_CONTACTS,
    VIEW_CALLS, RECORD_CALLS, DELETE_CALLS, EXPORT_CALLS,
    CREATE_TICKETS, EDIT_TICKETS, DELETE_TICKETS, VIEW_TICKETS, ASSIGN_TICKETS,
    VIEW_ANALYTICS, EXPORT_REPORTS, VIEW_INDIVIDUAL_PERFORMANCE,
)

# Reads every authenticated role receives while DEFAULT_ALLOW_READ is on.
READ_CAPABILITIES = frozenset({
    VIEW_CONTACTS, VIEW_CALLS, VIEW_TICKETS,
    VIEW_ANALYTICS, VIEW_INDIVIDUAL_PERFORMANCE,
})
RECORD_READ_CAPABILITIES = frozenset({VIEW_CONTACTS, VIEW_CALLS, VIEW_TICKETS})

# ── Default grants ───────────────────────────────────────────────────

_ORG_ADMIN_GRANTS = frozenset(set(ALL_CAPABILITIES) - {MANAGE_ORGANIZATIONS})

_MANAGER_GRANTS = frozenset({
    VIEW_USERS,
    MANAGE_TEAM_MEMBERS, VIEW_TEAM_ANALYTICS, ASSIGN_LEADS, VIEW_TEAM_CALLS,
    CREATE_CONTACTS, EDIT_CONTACTS, DELETE_CONTACTS, EXPORT_CONTACTS,
    RECORD_CALLS, EXPORT_CALLS,
    CREATE_TICKETS, EDIT_TICKETS, ASSIGN_TICKETS,
    EXPORT_REPORTS,
})

_AGENT_GRANTS = frozenset({
    CREATE_CONTACTS, EDIT_CONTACTS,
    RECORD_CALLS,
    CREATE_TICKETS, EDIT_TICKETS,
})


def build_default_grants(allow_default_reads: bool = True) -> Dict[str, FrozenSet[str]]:
    """
    Build the role -> capabilities table.

    With *allow_default_reads* every role holds READ_CAPABILITIES. Without it
    the viewer role is narrowed to record reads and must be granted analytics
    views explicitly.
    """
    viewer_reads = READ_CAPABILITIES if allow_default_reads else RECORD_READ_CAPABILITIES
    return {
        SUPER_ADMIN: frozenset(ALL_CAPABILITIES),
        ORG_ADMIN: _ORG_ADMIN_GRANTS,
        MANAGER: _MANAGER_GRANTS | READ_CAPABILITIES,
        AGENT: _AGENT_GRANTS | READ_CAPABILITIES,
        VIEWER: frozenset(viewer_reads),
    }


DEFAULT_GRANTS = build_default_grants(DEFAULT_ALLOW_READ)


def is_default_granted(role: str, capability: str,
                       grants: Optional[Dict[str, FrozenSet[str]]] = None) -> bool:
    """True if *role* receives *capability* without explicit assignment."""
    table = DEFAULT_GRANTS if grants is None else grants
    return capability in table.get(role, frozenset())
