"""
Authorization decorators for Flask views.

Stack them under ``token_required`` so that ``g.user_context`` is set:

    @app.route("/tickets/<ticket_id>", methods=["DELETE"])
    @token_required
    @require_capability(DELETE_TICKETS, reload=fetch_current_user)
    def delete_ticket(ticket_id): ...

``reload`` is optional. When given, it receives the token's context and
returns the user's current one, so a demotion or deactivation after the token
was issued takes effect immediately.
"""

from functools import wraps
from typing import Callable, Iterable, Optional

from flask import g, jsonify, request

from calltracker_authz.models import UserContext
from calltracker_authz.rbac import (
    can_access_organization,
    can_access_team_data,
    can_all,
    can_any,
)
from calltracker_authz.teams import TeamMembershipIndex

Reload = Callable[[UserContext], Optional[UserContext]]


def _current_user() -> Optional[UserContext]:
    return g.get("user_context")


def _denied(ctx: UserContext, message: str):
    print(f"[authz] denied user={ctx.id} role={ctx.role} "
          f"{request.method} {request.path}: {message}")
    return jsonify({"success": False, "message": message}), 403


def _unauthenticated():
    return jsonify({"success": False, "message": "Authentication required."}), 401


def _resolve_user(reload: Optional[Reload]):
    """
    Current user, re-fetched through *reload* when given. Returns
    ``(ctx, None)`` or ``(None, error_response)``.
    """
    ctx = _current_user()
    if ctx is None:
        return None, _unauthenticated()
    if reload is None:
        return ctx, None

    try:
        fresh = reload(ctx)
    except ValueError as e:
        # InvalidContext included: the directory no longer backs this session
        print(f"[authz] reload failed for user={ctx.id}: {e}")
        fresh = None
    if fresh is None:
        return None, (jsonify({"success": False,
                               "message": "Session is no longer valid. Please login again."}), 401)
    g.user_context = fresh
    return fresh, None


def require_capability(capability: str, reload: Optional[Reload] = None):
    """
    Deny unless the user holds *capability*. Pass *reload* for destructive
    actions so the check runs against a freshly fetched context instead of
    the token snapshot.
    """
    return require_all_capabilities([capability], reload=reload)


def require_any_capability(capabilities: Iterable[str], reload: Optional[Reload] = None):
    capabilities = list(capabilities)

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            ctx, error = _resolve_user(reload)
            if error is not None:
                return error
            if not can_any(ctx, capabilities):
                return _denied(ctx, f"Access denied. Required permissions: {' OR '.join(capabilities)}")
            return f(*args, **kwargs)
        return decorated

    return decorator


def require_all_capabilities(capabilities: Iterable[str], reload: Optional[Reload] = None):
    capabilities = list(capabilities)

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            ctx, error = _resolve_user(reload)
            if error is not None:
                return error
            if not can_all(ctx, capabilities):
                label = "permission" if len(capabilities) == 1 else "permissions"
                return _denied(ctx, f"Access denied. Required {label}: {' AND '.join(capabilities)}")
            return f(*args, **kwargs)
        return decorated

    return decorator


def require_role(roles):
    role_list = [roles] if isinstance(roles, str) else list(roles)

    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            ctx = _current_user()
            if ctx is None:
                return _unauthenticated()
            if ctx.role not in role_list:
                return _denied(ctx, f"Access denied. Required role: {' OR '.join(role_list)}")
            return f(*args, **kwargs)
        return decorated

    return decorator


def require_team_access(get_team_index: Callable[[UserContext], TeamMembershipIndex],
                        param: str = "team_id"):
    """
    Allow the view only if the user may see the team named by the *param*
    URL argument. *get_team_index* returns the directory snapshot for the user.
    Unknown teams answer 404; teams of another organization are denied to
    everyone but super admins.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            ctx = _current_user()
            if ctx is None:
                return _unauthenticated()
            team_id = kwargs.get(param) or request.args.get(param)
            if not team_id:
                return f(*args, **kwargs)

            index = get_team_index(ctx)
            team = index.get(team_id) if index is not None else None
            if team is None:
                return jsonify({"success": False, "message": "Team not found."}), 404
            if not can_access_organization(ctx, team.organization_id):
                return _denied(ctx, "Access denied. Team belongs to different organization.")
            if not can_access_team_data(ctx, team_id, index):
                return _denied(ctx, "Access denied. Not a member of this team.")
            return f(*args, **kwargs)
        return decorated

    return decorator
