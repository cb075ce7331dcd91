"""
Unit tests for the default grant table – exhaustive role × capability matrix.
"""

import itertools

import pytest

from calltracker_authz import roles
from calltracker_authz.config import DEFAULT_ALLOW_READ
from calltracker_authz.models import build_user_context
from calltracker_authz.rbac import can
from calltracker_authz.roles import (
    ALL_CAPABILITIES,
    ROLES,
    build_default_grants,
    is_default_granted,
)


# ── Expected grants, written out independently of roles.py ──────────

READS = {
    "view_contacts", "view_calls", "view_tickets",
    "view_analytics", "view_individual_performance",
}

AGENT = READS | {
    "create_contacts", "edit_contacts", "record_calls",
    "create_tickets", "edit_tickets",
}

MANAGER = AGENT | {
    "view_users", "manage_team_members", "view_team_analytics",
    "assign_leads", "view_team_calls", "delete_contacts", "export_contacts",
    "export_calls", "assign_tickets", "export_reports",
}

ORG_ADMIN = MANAGER | {
    "manage_users", "invite_users", "delete_users", "manage_teams",
    "view_org_analytics", "manage_org_settings", "delete_calls", "delete_tickets",
}

EXPECTED = {
    "super_admin": ORG_ADMIN | {"manage_organizations"},
    "org_admin": ORG_ADMIN,
    "manager": MANAGER,
    "agent": AGENT,
    "viewer": READS,
}

GRANTS = build_default_grants(allow_default_reads=True)


# ── Tests: table shape ───────────────────────────────────────────────

def test_capability_set_is_closed_and_unique():
    assert len(ALL_CAPABILITIES) == len(set(ALL_CAPABILITIES)) == 29


def test_every_granted_capability_is_known():
    for role, caps in GRANTS.items():
        assert role in ROLES
        assert caps <= set(ALL_CAPABILITIES)


def test_default_table_follows_config_flag():
    assert roles.DEFAULT_GRANTS == build_default_grants(DEFAULT_ALLOW_READ)


# ── Tests: exhaustive matrix ─────────────────────────────────────────

@pytest.mark.parametrize("role,capability", list(itertools.product(ROLES, ALL_CAPABILITIES)))
def test_default_grant_matrix(role, capability):
    expected = capability in EXPECTED[role]
    assert is_default_granted(role, capability, GRANTS) is expected

    ctx = build_user_context("u1", role, organization_id="org-1")
    assert can(ctx, capability, GRANTS) is expected


def test_unknown_role_or_capability_is_not_granted():
    assert is_default_granted("owner", "view_tickets", GRANTS) is False
    assert is_default_granted("org_admin", "launch_rockets", GRANTS) is False


# ── Tests: strict read policy ────────────────────────────────────────

def test_strict_reads_narrow_viewer_only():
    strict = build_default_grants(allow_default_reads=False)
    assert strict["viewer"] == frozenset({"view_contacts", "view_calls", "view_tickets"})
    for role in ("super_admin", "org_admin", "manager", "agent"):
        assert strict[role] == GRANTS[role]


def test_strict_reads_still_allow_explicit_analytics_for_viewer():
    strict = build_default_grants(allow_default_reads=False)
    viewer = build_user_context("v1", "viewer", explicit_permissions=["view_analytics"])
    assert can(viewer, "view_analytics", strict) is True
    assert can(viewer, "view_individual_performance", strict) is False
