"""
Closed vocabularies for the lead pipeline and the rules for editing them.

Selection widgets index into these tuples, so order is part of the contract:
an unrecognised value always normalises to the first entry (index 0) rather
than producing an out-of-range index.

Field names are different: they come from code, not from stored data, so the
vocabulary helpers raise ValueError for a field they do not know. The edit
rules answer False for one instead.
"""

from typing import Dict, Optional, Tuple

from calltracker_authz.config import PRIORITY_URGENT_AS_VALUE
from calltracker_authz.models import UserContext
from calltracker_authz.rbac import can
from calltracker_authz.roles import EDIT_TICKETS

LEAD_STATUS = "lead_status"
PRIORITY = "priority"
STAGE = "stage"
INTEREST_LEVEL = "interest_level"

URGENT = "urgent"

VOCABULARIES: Dict[str, Tuple[str, ...]] = {
    LEAD_STATUS: ("new", "contacted", "qualified", "converted", "closed"),
    PRIORITY: ("high", "medium", "low"),
    STAGE: ("prospect", "qualified", "proposal", "negotiation", "closed-won", "closed-lost"),
    INTEREST_LEVEL: ("hot", "warm", "cold"),
}

LABELS: Dict[str, Dict[str, str]] = {
    LEAD_STATUS: {
        "new": "New", "contacted": "Contacted", "qualified": "Qualified",
        "converted": "Converted", "closed": "Closed",
    },
    PRIORITY: {"high": "High", "medium": "Medium", "low": "Low", URGENT: "Urgent"},
    STAGE: {
        "prospect": "Prospect", "qualified": "Qualified", "proposal": "Proposal",
        "negotiation": "Negotiation", "closed-won": "Closed Won", "closed-lost": "Closed Lost",
    },
    INTEREST_LEVEL: {"hot": "Hot Lead", "warm": "Warm Lead", "cold": "Cold Lead"},
}

# Capability required to change each field on a ticket.
FIELD_CAPABILITIES: Dict[str, str] = {
    LEAD_STATUS: EDIT_TICKETS,
    PRIORITY: EDIT_TICKETS,
    STAGE: EDIT_TICKETS,
    INTEREST_LEVEL: EDIT_TICKETS,
}


def values(field: str, urgent_as_value: Optional[bool] = None) -> Tuple[str, ...]:
    """
    Ordered members of *field*'s vocabulary.

    With *urgent_as_value* the priority vocabulary gains "urgent" after the
    canonical three so existing indices do not move. Raises ValueError for
    an unknown field.
    """
    if field not in VOCABULARIES:
        raise ValueError(f"Unknown pipeline field: {field}")
    if urgent_as_value is None:
        urgent_as_value = PRIORITY_URGENT_AS_VALUE
    members = VOCABULARIES[field]
    if field == PRIORITY and urgent_as_value:
        members = members + (URGENT,)
    return members


def _key(raw) -> str:
    return str(raw).strip().lower() if raw is not None else ""


def _lookup(field: str, raw, urgent_as_value: Optional[bool]) -> Optional[int]:
    key = _key(raw)
    for i, member in enumerate(values(field, urgent_as_value)):
        if member == key:
            return i
    return None


def is_valid(field: str, raw, urgent_as_value: Optional[bool] = None) -> bool:
    return _lookup(field, raw, urgent_as_value) is not None


def normalize(field: str, raw, urgent_as_value: Optional[bool] = None) -> Tuple[str, int]:
    """
    Case-insensitive match; any unrecognised value becomes (first member, 0).
    An unknown field raises ValueError.
    """
    members = values(field, urgent_as_value)
    index = _lookup(field, raw, urgent_as_value)
    if index is None:
        return members[0], 0
    return members[index], index


def label_for(field: str, raw) -> str:
    """
    Display label for a stored value. Unknown values are shown as-is, None
    as "Unknown"; an unknown field raises ValueError.
    """
    if raw is None:
        return "Unknown"
    if field not in LABELS:
        raise ValueError(f"Unknown pipeline field: {field}")
    return LABELS[field].get(_key(raw), str(raw))


# ── Edit rules ───────────────────────────────────────────────────────

def can_edit_field(user: Optional[UserContext], field: str, grants=None) -> bool:
    capability = FIELD_CAPABILITIES.get(field)
    return capability is not None and can(user, capability, grants)


def can_transition(user: Optional[UserContext], field: str, current, target,
                   urgent_as_value: Optional[bool] = None, grants=None) -> bool:
    """
    True when *user* may move *field* from *current* to *target*. The target
    must be a real vocabulary member; the fallback entry does not count.
    An unknown field is refused.
    """
    if not can_edit_field(user, field, grants):
        return False
    if not is_valid(field, target, urgent_as_value):
        return False
    return normalize(field, target, urgent_as_value)[0] != normalize(field, current, urgent_as_value)[0]
