"""
Team membership index used for team-scoped delegation checks.
"""

from typing import Dict, FrozenSet, Iterable, Optional, Set

from calltracker_authz.models import Team


class TeamMembershipIndex:
    """
    Read-only lookup over a snapshot of teams.

    Unknown team ids never raise: membership questions about them answer
    False and set-valued lookups answer empty. Inactive teams are skipped
    when the index is built.
    """

    def __init__(self, teams: Optional[Iterable[Team]] = None):
        self._teams: Dict[str, Team] = {}
        managed: Dict[str, Set[str]] = {}
        joined: Dict[str, Set[str]] = {}

        for team in teams or ():
            if not team.is_active:
                continue
            self._teams[team.id] = team
            for user_id in team.manager_user_ids:
                managed.setdefault(user_id, set()).add(team.id)
            for user_id in team.member_user_ids:
                joined.setdefault(user_id, set()).add(team.id)

        self._managed_by = {u: frozenset(t) for u, t in managed.items()}
        self._member_of = {u: frozenset(t) for u, t in joined.items()}

    def __len__(self) -> int:
        return len(self._teams)

    def get(self, team_id) -> Optional[Team]:
        if team_id is None:
            return None
        return self._teams.get(str(team_id))

    def is_member(self, team_id, user_id) -> bool:
        team = self.get(team_id)
        return team is not None and user_id is not None and str(user_id) in team.member_user_ids

    def is_manager_of(self, team_id, user_id) -> bool:
        team = self.get(team_id)
        return team is not None and user_id is not None and str(user_id) in team.manager_user_ids

    def teams_managed_by(self, user_id) -> FrozenSet[str]:
        if user_id is None:
            return frozenset()
        return self._managed_by.get(str(user_id), frozenset())

    def teams_of(self, user_id) -> FrozenSet[str]:
        """Teams *user_id* belongs to as a member."""
        if user_id is None:
            return frozenset()
        return self._member_of.get(str(user_id), frozenset())
