"""
Unit tests for the team directory loader against an in-memory SQLite DB.
"""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from calltracker_authz.database import init_engine
from calltracker_authz.directory import load_team_index, load_user_context
from calltracker_authz.models import InvalidContext
from calltracker_authz.rbac import can_assign_contact_to_user, primary_dashboard_for


SCHEMA = [
    """CREATE TABLE crm_users (
        id TEXT PRIMARY KEY, display_name TEXT, role TEXT,
        organization_id TEXT, is_active INTEGER, is_super_admin INTEGER)""",
    "CREATE TABLE crm_user_permissions (user_id TEXT, permission TEXT)",
    "CREATE TABLE crm_teams (id TEXT PRIMARY KEY, organization_id TEXT, name TEXT, is_active INTEGER)",
    "CREATE TABLE crm_team_members (team_id TEXT, user_id TEXT, is_active INTEGER)",
    "CREATE TABLE crm_team_managers (team_id TEXT, user_id TEXT)",
]

ROWS = [
    ("crm_users", [
        ("m1", "Mia Manager", "manager", "org-1", 1, 0),
        ("a1", "Ari Agent", "Agent", "org-1", 1, 0),
        ("a2", "Ana Agent", "agent", "org-1", 1, 0),
        ("x1", "Gone", "agent", "org-1", 0, 0),
        ("bad", "Nurse", "nurse", "org-1", 1, 0),
        ("root", "Platform", "viewer", "org-1", 1, 1),
    ]),
    ("crm_user_permissions", [("a1", "export_reports"), ("a1", "view_team_calls")]),
    ("crm_teams", [
        ("t1", "org-1", "Inbound", 1),
        ("t2", "org-1", "Outbound", 1),
        ("t3", "org-1", "Archived", 0),
        ("t9", "org-2", "Elsewhere", 1),
    ]),
    ("crm_team_members", [
        ("t1", "a1", 1), ("t2", "a2", 1), ("t1", "x1", 0),
        ("t3", "a2", 1), ("t9", "a2", 1),
    ]),
    ("crm_team_managers", [("t1", "m1"), ("t3", "m1"), ("t9", "m1")]),
]


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    with eng.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
        for table, rows in ROWS:
            width = len(rows[0])
            placeholders = ", ".join(f":c{i}" for i in range(width))
            conn.execute(
                text(f"INSERT INTO {table} VALUES ({placeholders})"),
                [{f"c{i}": v for i, v in enumerate(row)} for row in rows],
            )
    return eng


# ── Tests: load_user_context ─────────────────────────────────────────

def test_load_user_context_agent(engine):
    ctx = load_user_context(engine, "a1")
    assert ctx.role == "agent"
    assert ctx.display_name == "Ari Agent"
    assert ctx.organization_id == "org-1"
    assert ctx.explicit_permissions == frozenset({"export_reports", "view_team_calls"})
    assert ctx.team_ids == frozenset({"t1"})
    assert ctx.managed_team_ids == frozenset()


def test_load_user_context_skips_inactive_and_foreign_teams(engine):
    manager = load_user_context(engine, "m1")
    assert manager.managed_team_ids == frozenset({"t1"})
    agent = load_user_context(engine, "a2")
    assert agent.team_ids == frozenset({"t2"})


def test_load_user_context_super_admin_flag(engine):
    ctx = load_user_context(engine, "root")
    assert ctx.role == "viewer"
    assert ctx.role_flags == frozenset({"super_admin"})
    assert primary_dashboard_for(ctx) == "org_admin"


@pytest.mark.parametrize("user_id", ["x1", "nobody"])
def test_load_user_context_missing_or_inactive(engine, user_id):
    with pytest.raises(ValueError, match="Unknown or inactive user"):
        load_user_context(engine, user_id)


def test_load_user_context_unsupported_role(engine):
    with pytest.raises(InvalidContext, match="Unsupported role"):
        load_user_context(engine, "bad")


# ── Tests: load_team_index ───────────────────────────────────────────

def test_load_team_index_scopes_to_organization(engine, capsys):
    index = load_team_index(engine, "org-1")
    assert len(index) == 2
    assert index.get("t9") is None
    assert index.get("t1").name == "Inbound"
    assert index.is_member("t1", "a1") is True
    assert index.is_member("t1", "x1") is False
    assert index.teams_managed_by("m1") == frozenset({"t1"})
    assert "[directory] Loaded 2 teams for organization org-1" in capsys.readouterr().out


def test_loaded_snapshot_drives_delegation(engine):
    index = load_team_index(engine, "org-1")
    manager = load_user_context(engine, "m1")
    assert can_assign_contact_to_user(manager, "a1", index) is True
    assert can_assign_contact_to_user(manager, "a2", index) is False


# ── Tests: init_engine ───────────────────────────────────────────────

def test_init_engine_explicit_uri(capsys):
    eng = init_engine("sqlite://")
    assert eng is not None
    assert "[init] Connected to directory DB." in capsys.readouterr().out


def test_init_engine_missing_env_exits(monkeypatch, capsys):
    monkeypatch.delenv("DIRECTORY_DB_URI", raising=False)
    with pytest.raises(SystemExit) as e:
        init_engine()
    assert e.value.code == 1
    assert "ERROR: env var DIRECTORY_DB_URI is not set" in capsys.readouterr().err
