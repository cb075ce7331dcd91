"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value


def get_bool_env(name: str, default: bool) -> bool:
    """Read a yes/no style environment variable, falling back to *default*."""
    value = os.getenv(name, "").strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


# ── Policy flags ─────────────────────────────────────────────────────

# Treat "urgent" as a fourth priority value instead of a display-only
# escalation of "high".
PRIORITY_URGENT_AS_VALUE = get_bool_env("PRIORITY_URGENT_AS_VALUE", False)

# Every authenticated role may read contacts, calls, tickets and analytics.
# When disabled, viewers keep record reads only.
DEFAULT_ALLOW_READ = get_bool_env("DEFAULT_ALLOW_READ", True)

# ── Session tokens ───────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_ALGORITHM = "HS256"
TOKEN_EXPIRY_HOURS = 24

# ── Team directory ───────────────────────────────────────────────────
DIRECTORY_DB_ENV = "DIRECTORY_DB_URI"
