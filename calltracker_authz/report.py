"""
Grant table reporting – matrix views for audits and explanations of decisions.
"""

from typing import Dict, FrozenSet, Optional

import pandas as pd

from calltracker_authz.models import UserContext
from calltracker_authz.roles import ALL_CAPABILITIES, DEFAULT_GRANTS, ROLES, is_default_granted


def _table(grants: Optional[Dict[str, FrozenSet[str]]]) -> Dict[str, FrozenSet[str]]:
    return DEFAULT_GRANTS if grants is None else grants


def grant_matrix(grants: Optional[Dict[str, FrozenSet[str]]] = None) -> pd.DataFrame:
    """Capabilities (rows, table order) by roles (columns) as booleans."""
    table = _table(grants)
    data = {
        role: [is_default_granted(role, cap, table) for cap in ALL_CAPABILITIES]
        for role in ROLES
    }
    df = pd.DataFrame(data, index=list(ALL_CAPABILITIES))
    df.index.name = "capability"
    return df


def role_summary(grants: Optional[Dict[str, FrozenSet[str]]] = None) -> pd.DataFrame:
    """Number of default grants per role, in role order."""
    matrix = grant_matrix(grants)
    summary = matrix.sum(axis=0).astype(int).reset_index()
    summary.columns = ["role", "grants"]
    return summary


def explain(user: Optional[UserContext], capability: str,
            grants: Optional[Dict[str, FrozenSet[str]]] = None) -> str:
    """One-line reason for the decision ``can(user, capability)`` would give."""
    if user is None:
        return f"{capability}: denied (no authenticated user)"
    if is_default_granted(user.role, capability, _table(grants)):
        return f"{capability}: granted by role {user.role}"
    if capability in user.explicit_permissions:
        return f"{capability}: granted explicitly to user {user.id}"
    return f"{capability}: denied for role {user.role}"
