"""
Interactive CLI for auditing the role grant table.
Prints the default grant matrix, then evaluates ad-hoc role/capability checks.
"""

from calltracker_authz.models import InvalidContext, build_user_context
from calltracker_authz.rbac import can, primary_dashboard_for
from calltracker_authz.report import explain, grant_matrix, role_summary
from calltracker_authz.roles import ALL_CAPABILITIES


def evaluate_line(line: str) -> str:
    """
    Evaluate ``<role> <capability> [extra,perms]`` and describe the result.
    """
    parts = line.split()
    if len(parts) < 2:
        return "Usage: <role> <capability> [extra,permissions]"

    role, capability = parts[0], parts[1]
    extra = parts[2].split(",") if len(parts) > 2 else []

    try:
        ctx = build_user_context("cli-user", role, explicit_permissions=extra)
    except InvalidContext as e:
        return f"[denied] {e}"

    if capability not in ALL_CAPABILITIES:
        return f"[denied] unknown capability '{capability}'"

    verdict = "allowed" if can(ctx, capability) else "denied"
    return (f"[{verdict}] {explain(ctx, capability)} "
            f"(dashboard={primary_dashboard_for(ctx).value})")


def main():
    print("=== CallTracker Authorization: grant table audit ===\n")
    print(grant_matrix().apply(lambda col: col.map({True: "x", False: ""})).to_string())
    print("\n[Grants per role]")
    print(role_summary().to_string(index=False))

    while True:
        try:
            line = input("\nCheck '<role> <capability> [extra,perms]' (or 'quit'): ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not line:
            continue
        if line.lower() in {"quit", "exit"}:
            print("Goodbye.")
            break

        print(evaluate_line(line))


if __name__ == "__main__":
    main()
