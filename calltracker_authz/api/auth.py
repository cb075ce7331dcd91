"""
JWT session helpers and the authentication decorator for Flask views.
"""

from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Dict, Optional

import jwt
from flask import g, jsonify, request

from calltracker_authz.config import SECRET_KEY, TOKEN_ALGORITHM, TOKEN_EXPIRY_HOURS
from calltracker_authz.models import InvalidContext, UserContext, build_user_context


def generate_token(ctx: UserContext, expires_in: Optional[timedelta] = None) -> str:
    """Generate a JWT carrying everything needed to rebuild *ctx*."""
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": ctx.id,
        "role": ctx.role,
        "organization_id": ctx.organization_id,
        "display_name": ctx.display_name,
        "permissions": sorted(ctx.explicit_permissions),
        "team_ids": sorted(ctx.team_ids),
        "managed_team_ids": sorted(ctx.managed_team_ids),
        "role_flags": sorted(ctx.role_flags),
        "iat": now,
        "exp": now + (expires_in if expires_in is not None else timedelta(hours=TOKEN_EXPIRY_HOURS)),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token and return the decoded payload (or None)."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def context_from_token(token: str) -> Optional[UserContext]:
    """
    Rebuild the UserContext from a session token.

    Returns None for a missing, expired or tampered token. A token whose role
    is not recognised raises InvalidContext.
    """
    if not token:
        return None
    payload = verify_token(token)
    if not payload:
        return None
    return build_user_context(
        user_id=payload.get("user_id"),
        role=payload.get("role"),
        organization_id=payload.get("organization_id"),
        explicit_permissions=payload.get("permissions"),
        team_ids=payload.get("team_ids"),
        managed_team_ids=payload.get("managed_team_ids"),
        role_flags=payload.get("role_flags"),
        display_name=payload.get("display_name") or "",
    )


def _request_token() -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if auth_header:
        parts = auth_header.split(" ")
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
        return None
    return request.args.get("token")


def token_required(f):
    """Decorator that authenticates the request and sets g.user_context."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = _request_token()
        if not token:
            return jsonify({"error": "Authentication token is missing"}), 401

        try:
            ctx = context_from_token(token)
        except InvalidContext:
            return jsonify({"error": "Session is no longer valid. Please login again."}), 401
        if ctx is None:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.user_context = ctx
        g.token = token
        return f(*args, **kwargs)

    return decorated
