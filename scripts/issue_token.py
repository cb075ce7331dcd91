#!/usr/bin/env python3
"""
Issue a session token for a directory user.
Loads the user's context from DIRECTORY_DB_URI and prints a signed JWT that
can be sent as ``Authorization: Bearer <token>``.
"""

import sys

from calltracker_authz.api.auth import generate_token
from calltracker_authz.database import init_engine
from calltracker_authz.directory import load_user_context
from calltracker_authz.models import InvalidContext
from calltracker_authz.rbac import primary_dashboard_for


def main(argv):
    if len(argv) != 2:
        print("Usage: issue_token.py <user_id>", file=sys.stderr)
        return 2

    engine = init_engine()
    try:
        ctx = load_user_context(engine, argv[1])
    except InvalidContext as e:
        print(f"ERROR: user has an invalid session context: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print("=" * 70)
    print(f"User:       {ctx.display_name or ctx.id} (role={ctx.role})")
    print(f"Org:        {ctx.organization_id}")
    print(f"Dashboard:  {primary_dashboard_for(ctx).value}")
    print(f"Extra:      {', '.join(sorted(ctx.explicit_permissions)) or '(none)'}")
    print("=" * 70)
    print(generate_token(ctx))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
