"""
Team directory – building UserContext and TeamMembershipIndex snapshots.

Read-only: the directory tables are owned by the host application.
"""

from collections import defaultdict

from sqlalchemy import text

from calltracker_authz.models import UserContext, build_team, build_user_context
from calltracker_authz.roles import SUPER_ADMIN
from calltracker_authz.teams import TeamMembershipIndex


def load_user_context(engine, user_id) -> UserContext:
    """
    Look up an active user and return their UserContext. Team ids only
    include active teams of the user's own organization.
    """
    user_sql = text("""
        SELECT id, display_name, role, organization_id, is_super_admin
        FROM crm_users
        WHERE id = :uid AND is_active = 1
    """)
    perms_sql = text("""
        SELECT permission FROM crm_user_permissions WHERE user_id = :uid
    """)
    member_sql = text("""
        SELECT m.team_id
        FROM crm_team_members m JOIN crm_teams t ON t.id = m.team_id
        WHERE m.user_id = :uid AND m.is_active = 1
          AND t.is_active = 1 AND t.organization_id = :org
    """)
    managed_sql = text("""
        SELECT g.team_id
        FROM crm_team_managers g JOIN crm_teams t ON t.id = g.team_id
        WHERE g.user_id = :uid
          AND t.is_active = 1 AND t.organization_id = :org
    """)

    params = {"uid": user_id}
    with engine.connect() as conn:
        row = conn.execute(user_sql, params).mappings().first()
        if not row:
            raise ValueError(f"Unknown or inactive user '{user_id}' in crm_users.")
        permissions = [r["permission"] for r in conn.execute(perms_sql, params).mappings().all()]
        team_params = {"uid": user_id, "org": row["organization_id"]}
        team_ids = [r["team_id"] for r in conn.execute(member_sql, team_params).mappings().all()]
        managed_ids = [r["team_id"] for r in conn.execute(managed_sql, team_params).mappings().all()]

    return build_user_context(
        user_id=row["id"],
        role=row["role"],
        organization_id=row["organization_id"],
        explicit_permissions=permissions,
        team_ids=team_ids,
        managed_team_ids=managed_ids,
        role_flags=[SUPER_ADMIN] if row["is_super_admin"] else [],
        display_name=str(row["display_name"] or ""),
    )


def load_team_index(engine, organization_id) -> TeamMembershipIndex:
    """Build a TeamMembershipIndex over the active teams of one organization."""
    teams_sql = text("""
        SELECT id, name FROM crm_teams
        WHERE organization_id = :org AND is_active = 1
    """)
    members_sql = text("""
        SELECT m.team_id, m.user_id
        FROM crm_team_members m JOIN crm_teams t ON t.id = m.team_id
        WHERE t.organization_id = :org AND m.is_active = 1
    """)
    managers_sql = text("""
        SELECT g.team_id, g.user_id
        FROM crm_team_managers g JOIN crm_teams t ON t.id = g.team_id
        WHERE t.organization_id = :org
    """)

    params = {"org": organization_id}
    members = defaultdict(list)
    managers = defaultdict(list)
    with engine.connect() as conn:
        team_rows = conn.execute(teams_sql, params).mappings().all()
        for r in conn.execute(members_sql, params).mappings().all():
            members[str(r["team_id"])].append(r["user_id"])
        for r in conn.execute(managers_sql, params).mappings().all():
            managers[str(r["team_id"])].append(r["user_id"])

    teams = [
        build_team(
            team_id=r["id"],
            organization_id=organization_id,
            member_user_ids=members[str(r["id"])],
            manager_user_ids=managers[str(r["id"])],
            name=str(r["name"] or ""),
        )
        for r in team_rows
    ]
    print(f"[directory] Loaded {len(teams)} teams for organization {organization_id}")
    return TeamMembershipIndex(teams)
